"""
Demo Data Loader

Seeds the course catalogue, the home page featured courses and a batch of
enquiries spread across every review status.
Usage: python -m testcademy.scripts.load_demo --enquiries 30
"""
import asyncio
import argparse
import random
from sqlalchemy import text
from faker import Faker

from testcademy.database import AsyncSessionLocal
from testcademy.models.enquiry import EnquiryStatus
from testcademy.services.enquiry_review import EnquiryReviewWorkflow
from testcademy.services.enquiry_submission import EnquirySubmissionService
from testcademy.services.featured_courses import CourseCatalogService

fake = Faker()

DEMO_COURSES = [
    {"title": "Complete Software Testing", "category": "complete", "duration_days": 60, "price": "149.00"},
    {"title": "Fast Track QA", "category": "fasttrack", "duration_days": 30, "price": "99.00"},
    {"title": "Test Automation with Selenium", "category": "automation", "duration_days": 45, "price": "129.00"},
    {"title": "Manual Testing Fundamentals", "category": "manual", "duration_days": 21, "price": "79.00"},
    {"title": "SQL for Testers", "category": "sql", "duration_days": 14, "price": "49.00"},
    {"title": "Performance Testing with JMeter", "category": "jmeter", "duration_days": 21, "price": "89.00"},
]

# Share of demo enquiries left in each status
STATUS_WEIGHTS = {
    EnquiryStatus.PENDING: 0.45,
    EnquiryStatus.CONTACTED: 0.25,
    EnquiryStatus.APPROVED: 0.20,
    EnquiryStatus.REJECTED: 0.10,
}

ADMIN_NOTES = {
    EnquiryStatus.CONTACTED: "Called, sent course brochure on WhatsApp",
    EnquiryStatus.APPROVED: "Payment confirmed, ready for enrollment",
    EnquiryStatus.REJECTED: "Duplicate enquiry",
}


async def clear_demo_data():
    """Clear all existing data"""
    async with AsyncSessionLocal() as session:
        for table in ["enquiries", "featured_course_settings", "courses"]:
            await session.execute(text(f"DELETE FROM {table}"))
        await session.commit()
    print("✓ Cleared existing data")


async def load_courses() -> list:
    async with AsyncSessionLocal() as session:
        catalog = CourseCatalogService(session)
        courses = []
        for data in DEMO_COURSES:
            courses.append(await catalog.create_course(
                dict(data, description=fake.paragraph(nb_sentences=3))
            ))

        await catalog.set_featured([courses[0].id, courses[2].id], show=True)

    print(f"  Created {len(courses)} courses, featured: {courses[0].title}, {courses[2].title}")
    return courses


async def load_enquiries(courses: list, count: int):
    statuses = list(STATUS_WEIGHTS.keys())
    weights = list(STATUS_WEIGHTS.values())
    totals = {status.value: 0 for status in statuses}

    async with AsyncSessionLocal() as session:
        submission = EnquirySubmissionService(session)
        workflow = EnquiryReviewWorkflow(session)

        for _ in range(count):
            course = random.choice(courses + [None])  # None: general enquiry
            enquiry = await submission.submit({
                "full_name": fake.name(),
                "email": fake.email(),
                "phone": fake.phone_number(),
                "course_id": str(course.id) if course else None,
                "course_interest": course.title if course else None,
                "message": fake.sentence(nb_words=14),
            })

            status = random.choices(statuses, weights=weights)[0]
            if status is not EnquiryStatus.PENDING:
                await workflow.update_status(enquiry.id, status.value, notes=ADMIN_NOTES[status])
            totals[status.value] += 1

    print(f"  Created {count} enquiries: " + ", ".join(f"{k}={v}" for k, v in totals.items()))


async def load_demo(enquiry_count: int):
    await clear_demo_data()

    print("\nLoading demo data...")
    courses = await load_courses()
    await load_enquiries(courses, enquiry_count)

    print("\n✅ Demo data loaded successfully!")


def main():
    """CLI entry point"""
    parser = argparse.ArgumentParser(description="Load demo courses and enquiries")
    parser.add_argument(
        "--enquiries",
        "-n",
        type=int,
        default=30,
        help="Number of enquiries to create"
    )

    args = parser.parse_args()
    asyncio.run(load_demo(args.enquiries))


if __name__ == "__main__":
    main()
