import logging

from fastapi.responses import HTMLResponse, RedirectResponse

from rewrite_proxy.config import get_proxy_config
from rewrite_proxy.fallback import NGINX_WELCOME_PAGE, rejection_response
from rewrite_proxy.server import log_startup_config


class TestLogStartupConfig:
    def test_warns_without_hostname(self, proxy_env, caplog):
        proxy_env()
        caplog.set_level(logging.INFO, logger="uvicorn.error")

        log_startup_config()

        assert any("PROXY_HOSTNAME is not set" in r.getMessage() for r in caplog.records)

    def test_reports_target(self, proxy_env, caplog):
        proxy_env(PROXY_HOSTNAME="github.com")
        caplog.set_level(logging.INFO, logger="uvicorn.error")

        log_startup_config()

        messages = [r.getMessage() for r in caplog.records]
        assert any(
            "https://github.com" in m and "github.com->api.github.com" in m
            for m in messages
        )

    def test_reports_invalid_config(self, proxy_env, caplog):
        proxy_env(PROXY_HOSTNAME="github.com", PATHNAME_REGEX="(")
        caplog.set_level(logging.INFO, logger="uvicorn.error")

        log_startup_config()

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors and "PATHNAME_REGEX" in errors[0].getMessage()


class TestRejectionResponse:
    def test_fallback_page(self):
        response = rejection_response(get_proxy_config({}))

        assert isinstance(response, HTMLResponse)
        assert response.status_code == 200
        assert response.body == NGINX_WELCOME_PAGE.encode("utf-8")
        assert response.headers["content-type"] == "text/html; charset=utf-8"

    def test_redirect(self):
        response = rejection_response(get_proxy_config({"URL302": "https://example.com/"}))

        assert isinstance(response, RedirectResponse)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/"
