"""
Contact Dispatch Helper

Builds ready-to-open WhatsApp and mailto: links for reaching out to a student.
Everything here is a pure function: no network I/O, no state. Opening the
link is left to the admin's browser.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import quote

from testcademy.exceptions import InvalidContactError

WHATSAPP_BASE_URL = "https://wa.me/"

# Same unreserved set as JavaScript's encodeURIComponent
URI_COMPONENT_SAFE = "-_.!~*'()"

NON_DIGITS = re.compile(r"[^0-9]")

DEFAULT_TOPIC = "our courses"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=URI_COMPONENT_SAFE)


def build_whatsapp_link(phone: str, message_template: str) -> str:
    """
    Build a wa.me deep link.

    Args:
        phone: Phone number in any format; every non-digit is dropped
        message_template: Text to pre-fill in the chat

    Returns:
        https://wa.me/<digits>?text=<encoded message>

    Raises:
        InvalidContactError: If the phone number has no digits
    """
    digits = NON_DIGITS.sub("", phone or "")
    if not digits:
        raise InvalidContactError("phone", "Phone number contains no digits")

    return f"{WHATSAPP_BASE_URL}{digits}?text={encode_uri_component(message_template or '')}"


def build_email_link(email: str, subject: str, body: str) -> str:
    """
    Build a mailto: link with encoded subject and body.

    Only emptiness is checked; the address syntax is not validated.

    Raises:
        InvalidContactError: If email is empty
    """
    address = (email or "").strip()
    if not address:
        raise InvalidContactError("email", "Email address is empty")

    return (
        f"mailto:{address}"
        f"?subject={encode_uri_component(subject or '')}"
        f"&body={encode_uri_component(body or '')}"
    )


@dataclass
class ContactLinks:
    """Both contact links for one enquiry; a failed link is None with its reason in errors"""
    whatsapp: Optional[str] = None
    email: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)


def whatsapp_message(full_name: str, course_interest: Optional[str] = None) -> str:
    topic = course_interest or DEFAULT_TOPIC
    return (
        f"Hi {full_name}, thank you for your interest in our courses. "
        f"I'm reaching out regarding your enquiry about {topic}. "
        f"How can I help you today?"
    )


def email_subject(course_interest: Optional[str] = None) -> str:
    return f"Re: Your enquiry about {course_interest or DEFAULT_TOPIC}"


def email_body(full_name: str, team_name: str) -> str:
    return (
        f"Hi {full_name},\n\n"
        f"Thank you for your interest in our courses. "
        f"I'm reaching out regarding your enquiry.\n\n"
        f"Best regards,\n{team_name}"
    )


def enquiry_contact_links(enquiry, team_name: str) -> ContactLinks:
    """
    Build the admin panel's WhatsApp and email links for an enquiry.

    A missing phone number or email only disables that one link.
    """
    links = ContactLinks()

    try:
        links.whatsapp = build_whatsapp_link(
            enquiry.phone,
            whatsapp_message(enquiry.full_name, enquiry.course_interest),
        )
    except InvalidContactError as e:
        links.errors[e.field] = e.message

    try:
        links.email = build_email_link(
            enquiry.email,
            email_subject(enquiry.course_interest),
            email_body(enquiry.full_name, team_name),
        )
    except InvalidContactError as e:
        links.errors[e.field] = e.message

    return links
