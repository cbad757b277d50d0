"""
Course catalogue and home page featured-course selection.

The home page shows at most MAX_FEATURED_COURSES courses, picked by an admin.
"""
import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from testcademy.exceptions import ValidationError
from testcademy.models.course import Course
from testcademy.models.featured_courses import FeaturedCourseSettings

logger = logging.getLogger(__name__)

MAX_FEATURED_COURSES = 2
SETTINGS_ROW_ID = 1


def _parse_course_id(value: Any) -> uuid.UUID:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid course id: {value!r}", fields=["course_ids"])


class CourseCatalogService:
    """Course listing/creation and the featured selection"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_courses(self, active_only: bool = True) -> List[Course]:
        query = select(Course).order_by(Course.created_at, Course.title)
        if active_only:
            query = query.where(Course.is_active.is_(True))

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create_course(self, data: Mapping[str, Any]) -> Course:
        """
        Add a course to the catalogue.

        Raises:
            ValidationError: Blank title, non-positive duration or bad price
        """
        title = str(data.get("title") or "").strip()
        duration = data.get("duration_days")

        errors = []
        if not title:
            errors.append("title")
        if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
            errors.append("duration_days")

        price = data.get("price")
        if price is None:
            price = Decimal("149.00")
        else:
            try:
                price = Decimal(str(price))
            except InvalidOperation:
                errors.append("price")
            else:
                if price < 0:
                    errors.append("price")

        if errors:
            raise ValidationError(f"Invalid course field(s): {', '.join(errors)}", fields=errors)

        course = Course(
            id=uuid.uuid4(),
            title=title,
            description=data.get("description"),
            category=data.get("category"),
            duration_days=duration,
            price=price,
            is_active=bool(data.get("is_active", True)),
        )
        self.session.add(course)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Course {course.id} created: {course.title}")
        return course

    async def _load_settings(self) -> FeaturedCourseSettings:
        settings = await self.session.get(FeaturedCourseSettings, SETTINGS_ROW_ID)
        if settings is None:
            settings = FeaturedCourseSettings(
                id=SETTINGS_ROW_ID,
                featured_course_ids=[],
                show_featured_courses=True,
            )
        return settings

    async def get_featured_settings(self) -> Dict[str, Any]:
        settings = await self._load_settings()
        return {
            "featured_course_ids": list(settings.featured_course_ids or []),
            "show_featured_courses": settings.show_featured_courses,
        }

    async def get_featured(self) -> List[Course]:
        """
        Courses for the home page showcase, in selection order.

        Empty when the showcase is switched off or nothing is selected;
        inactive or deleted courses are skipped.
        """
        settings = await self._load_settings()
        selected = list(settings.featured_course_ids or [])
        if not settings.show_featured_courses or not selected:
            return []

        ids = [uuid.UUID(course_id) for course_id in selected]
        result = await self.session.execute(
            select(Course).where(Course.id.in_(ids), Course.is_active.is_(True))
        )
        by_id = {str(course.id): course for course in result.scalars().all()}
        return [by_id[course_id] for course_id in selected if course_id in by_id]

    async def set_featured(self, course_ids: Sequence[Any], show: bool = True) -> Dict[str, Any]:
        """
        Replace the featured selection.

        Raises:
            ValidationError: More than MAX_FEATURED_COURSES ids, duplicates,
                or ids that match no course. The stored selection is untouched.
        """
        if len(course_ids) > MAX_FEATURED_COURSES:
            raise ValidationError(
                f"At most {MAX_FEATURED_COURSES} featured courses can be selected "
                f"({len(course_ids)} given)",
                fields=["course_ids"],
            )

        ids = [_parse_course_id(course_id) for course_id in course_ids]
        if len(set(ids)) != len(ids):
            raise ValidationError("Duplicate course ids in featured selection", fields=["course_ids"])

        if ids:
            result = await self.session.execute(select(Course.id).where(Course.id.in_(ids)))
            existing = set(result.scalars().all())
            unknown = [str(course_id) for course_id in ids if course_id not in existing]
            if unknown:
                raise ValidationError(
                    f"Unknown course id(s): {', '.join(unknown)}",
                    fields=["course_ids"],
                )

        settings = await self._load_settings()
        settings.featured_course_ids = [str(course_id) for course_id in ids]
        settings.show_featured_courses = show
        self.session.add(settings)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Featured courses updated: {settings.featured_course_ids} (show={show})")
        return {
            "featured_course_ids": list(settings.featured_course_ids),
            "show_featured_courses": settings.show_featured_courses,
        }
