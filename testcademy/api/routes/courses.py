"""
Course API Endpoints

GET /api/v1/courses - Active course catalogue
GET /api/v1/featured-courses - Home page showcase
POST /api/v1/admin/courses - Add a course
GET /api/v1/admin/featured-courses - Current featured selection
PUT /api/v1/admin/featured-courses - Replace the featured selection (max 2)
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from testcademy.api.auth import require_admin
from testcademy.database import get_db
from testcademy.services.featured_courses import CourseCatalogService

router = APIRouter(prefix="/api/v1", tags=["courses"])


class CourseCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    duration_days: int = Field(..., alias="durationDays")
    price: Optional[Decimal] = None
    is_active: bool = Field(True, alias="isActive")


class FeaturedCoursesUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_ids: List[str] = Field(default_factory=list, alias="featuredCourseIds")
    show_featured_courses: bool = Field(True, alias="showFeaturedCourses")


class CourseListResponse(BaseModel):
    """Standard response wrapper"""
    data: List[Dict[str, Any]]


class CourseResponse(BaseModel):
    data: Dict[str, Any]


@router.get("/courses", response_model=CourseListResponse)
async def list_courses(db: AsyncSession = Depends(get_db)):
    courses = await CourseCatalogService(db).list_courses(active_only=True)
    return CourseListResponse(data=[course.to_dict() for course in courses])


@router.get("/featured-courses", response_model=CourseListResponse)
async def get_featured_courses(db: AsyncSession = Depends(get_db)):
    """Featured courses for the home page; empty when the showcase is switched off"""
    courses = await CourseCatalogService(db).get_featured()
    return CourseListResponse(data=[course.to_dict() for course in courses])


@router.post("/admin/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    request: CourseCreate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    course = await CourseCatalogService(db).create_course(request.model_dump())
    return CourseResponse(data=course.to_dict())


@router.get("/admin/featured-courses", response_model=CourseResponse)
async def get_featured_selection(
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    return CourseResponse(data=await CourseCatalogService(db).get_featured_settings())


@router.put("/admin/featured-courses", response_model=CourseResponse)
async def update_featured_courses(
    request: FeaturedCoursesUpdate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Replace the featured selection (at most 2 existing courses)"""
    selection = await CourseCatalogService(db).set_featured(
        request.course_ids,
        show=request.show_featured_courses,
    )
    return CourseResponse(data=selection)
