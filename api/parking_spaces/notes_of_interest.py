"""Note of interest endpoint: POST /api/parking-spaces/{rentalObjectCode}/notes-of-interest."""

from http.server import BaseHTTPRequestHandler

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from src.models.applicant import ApplicationType
from src.services.note_of_interest import create_note_of_interest_for_internal_parking_space
from src.utils.http import bad_request, path_param, read_json_body, respond_with_process
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

PATH_PATTERN = r"/parking-spaces/(?P<id>[^/]+)/notes-of-interest"


class NoteOfInterestRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    contact_code: str
    application_type: ApplicationType = ApplicationType.ADDITIONAL


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for application intake."""

    def do_POST(self):
        rental_object_code = path_param(self.path, PATH_PATTERN, "rentalObjectCode")
        if not rental_object_code:
            bad_request(self, "rentalObjectCode is required")
            return

        try:
            body = NoteOfInterestRequest.model_validate(read_json_body(self))
        except (ValueError, ValidationError) as e:
            bad_request(self, f"Invalid request body: {e}")
            return

        respond_with_process(
            self,
            lambda: create_note_of_interest_for_internal_parking_space(
                rental_object_code, body.contact_code, body.application_type
            ),
        )
