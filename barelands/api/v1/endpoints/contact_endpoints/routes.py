from fastapi import APIRouter, Depends

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.dependencies import Services, get_services
from barelands.api.v1.errors import NotFoundError
from barelands.models.models.contact import ContactRequest, PrintInquiryRequest

contact_endpoint_router = APIRouter()


def _delivery_message(delivered: bool, sent: str) -> str:
    if delivered:
        return sent
    return "Your message was received (Note: Email delivery is simulated in development mode)"


@contact_endpoint_router.post("/contact")
async def submit_contact_form(
    contact: ContactRequest, services: Services = Depends(get_services)
):
    logger.info(f"Contact form submission from {contact.email}: {contact.subject!r}")
    delivered = await services.mailer.send(services.mailer.contact_message(contact))
    return {
        "success": True,
        "message": _delivery_message(delivered, "Your message has been sent successfully"),
    }


@contact_endpoint_router.post("/prints/inquiry")
async def submit_print_inquiry(
    inquiry: PrintInquiryRequest, services: Services = Depends(get_services)
):
    """Print purchase inquiry, optionally about one catalog photo."""
    if inquiry.photo_id:
        photo = await services.store.get(inquiry.photo_id)
        if photo is None:
            raise NotFoundError("Photo not found", details={"id": inquiry.photo_id})
        if not inquiry.photo_title:
            inquiry = inquiry.model_copy(update={"photo_title": photo.title})

    logger.info(f"Print inquiry from {inquiry.email} about {inquiry.photo_title or 'no photo'}")
    delivered = await services.mailer.send(services.mailer.print_inquiry_message(inquiry))
    return {
        "success": True,
        "message": _delivery_message(delivered, "Your inquiry has been sent successfully"),
    }
