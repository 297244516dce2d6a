"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler

from src.utils.config import ServiceConfig
from src.utils.http import send_json


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        send_json(self, 200, {
            "status": "ok",
            "service": ServiceConfig.SERVICE_NAME,
            "environment": ServiceConfig.ENVIRONMENT,
        })

    def do_POST(self):
        """Same as GET for health check."""
        self.do_GET()
