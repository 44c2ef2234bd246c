from http.server import BaseHTTPRequestHandler, HTTPServer
import os

from lead_notifier import HandlerOptions, Settings, SubmissionHandler
from lead_notifier.log import get_logger

logger = get_logger(__name__)

# Contract:
# - Method: POST (OPTIONS answered for CORS preflight)
# - Body: application/json {name, email, company?, message}
# - Env: BOT_TOKEN, CHAT_ID, TOPIC_ID (optional), APP_ENV
# - Success: 200 {success: true, messageId}
# - Error: 400/405/500 {success: false, error}

OPTIONS = HandlerOptions(enable_cors=True, supports_topics=True)


class handler(BaseHTTPRequestHandler):
    def _dispatch(self):
        try:
            length = int(self.headers.get('Content-Length') or 0)
        except ValueError:
            length = 0
        raw = self.rfile.read(length) if length > 0 else None
        resp = SubmissionHandler(Settings.from_env(), OPTIONS).handle(self.command, dict(self.headers), raw)

        payload = resp.json().encode('utf-8')
        self.send_response(resp.status_code)
        for k, v in resp.headers.items():
            self.send_header(k, v)
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(payload)

    def __getattr__(self, name):
        # every verb reaches the pipeline, which answers 405 for anything but POST and OPTIONS
        if name.startswith('do_'):
            return self._dispatch
        raise AttributeError(name)

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)


if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()

    port = int(os.getenv("PORT", "3000"))
    logger.info("Serving contact form relay on http://127.0.0.1:%s", port)
    HTTPServer(("127.0.0.1", port), handler).serve_forever()
