"""Offer generation endpoint: POST /api/listings/{listingId}/offers."""

from http.server import BaseHTTPRequestHandler

from src.services.offer_generator import create_offer_for_internal_parking_space
from src.utils.http import bad_request, parse_int_id, path_param, respond_with_process
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

PATH_PATTERN = r"/listings/(?P<id>[^/]+)/offers"


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for offer generation."""

    def do_POST(self):
        listing_id = parse_int_id(path_param(self.path, PATH_PATTERN, "listingId"))
        if listing_id is None:
            bad_request(self, "listingId must be an integer")
            return

        respond_with_process(self, lambda: create_offer_for_internal_parking_space(listing_id))
