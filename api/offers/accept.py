"""Accept offer endpoint: POST /api/offers/{offerId}/accept."""

from http.server import BaseHTTPRequestHandler

from src.services.offer_reply import accept_offer
from src.utils.http import bad_request, parse_int_id, path_param, respond_with_process
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

PATH_PATTERN = r"/offers/(?P<id>[^/]+)/accept"


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for accepting an offer."""

    def do_POST(self):
        offer_id = parse_int_id(path_param(self.path, PATH_PATTERN, "offerId"))
        if offer_id is None:
            bad_request(self, "offerId must be an integer")
            return

        respond_with_process(self, lambda: accept_offer(offer_id))
