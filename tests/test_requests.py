"""Tests for scan request validation."""

import pytest

from wcagscan.modules.scanner import (
    LoginCredentials,
    RequestValidationError,
    ScanOptions,
    parse_batch_request,
    parse_scan_request,
)


class TestScanRequest:
    def test_defaults(self) -> None:
        options = parse_scan_request({"url": "https://example.com"})
        assert options == ScanOptions(url="https://example.com")

    def test_all_fields(self) -> None:
        options = parse_scan_request(
            {
                "url": " https://example.com/page ",
                "wcagVersion": "2.2",
                "level": "AAA",
                "includeScreenshot": True,
                "includeBestPractices": True,
                "waitTime": 0,
                "timeout": 5000,
            }
        )
        assert options.url == "https://example.com/page"
        assert options.wcag_version == "2.2"
        assert options.level == "AAA"
        assert options.include_screenshot is True
        assert options.include_best_practices is True
        assert options.wait_time == 0
        assert options.timeout == 5000

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ({}, "URL is required"),
            ({"url": ""}, "URL is required"),
            ({"url": "not a url"}, "Invalid URL format"),
            ({"url": "ftp://example.com"}, "Invalid URL format"),
            ({"url": "https://x.test", "level": "B"}, "Invalid level"),
            ({"url": "https://x.test", "wcagVersion": "3"}, "Invalid wcagVersion"),
            ({"url": "https://x.test", "includeScreenshot": "yes"}, "must be a boolean"),
            ({"url": "https://x.test", "waitTime": -5}, "at least 0"),
            ({"url": "https://x.test", "timeout": "fast"}, "milliseconds"),
        ],
    )
    def test_invalid(self, payload: dict, message: str) -> None:
        with pytest.raises(RequestValidationError, match=message):
            parse_scan_request(payload)

    def test_login_block(self) -> None:
        options = parse_scan_request(
            {
                "url": "https://example.com/dashboard",
                "login": {
                    "loginUrl": "/login",
                    "usernameSelector": "#email",
                    "passwordSelector": "#password",
                    "username": " tester@example.com ",
                    "password": " padded ",
                    "waitForLoginTimeout": 2500,
                },
            }
        )
        assert options.login == LoginCredentials(
            login_url="/login",
            username_selector="#email",
            password_selector="#password",
            username="tester@example.com",
            password=" padded ",
            wait_for_login_timeout=2500,
        )
        assert options.login.submit_selector == 'button[type="submit"]'
        assert "padded" not in repr(options.login)

    @pytest.mark.parametrize(
        ("login", "message"),
        [
            ("/login", "login must be an object"),
            ({"usernameSelector": "#u", "passwordSelector": "#p"}, "login.loginUrl is required"),
            (
                {"loginUrl": "javascript:alert(1)", "usernameSelector": "#u",
                 "passwordSelector": "#p", "username": "u", "password": "p"},
                "Invalid login URL",
            ),
            (
                {"loginUrl": "/login", "usernameSelector": "#u", "passwordSelector": "#p",
                 "username": "u", "password": "p", "waitForLoginTimeout": 0},
                "waitForLoginTimeout must be at least 1",
            ),
        ],
    )
    def test_invalid_login(self, login, message: str) -> None:
        with pytest.raises(RequestValidationError, match=message):
            parse_scan_request({"url": "https://example.com", "login": login})

    def test_body_must_be_object(self) -> None:
        with pytest.raises(RequestValidationError):
            parse_scan_request(["https://example.com"])

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_scan_request({})


class TestBatchRequest:
    def test_valid_request(self) -> None:
        request = parse_batch_request(
            {"urls": ["https://a.test", "https://b.test"], "level": "A", "maxConcurrent": 2}
        )
        assert request.urls == ("https://a.test", "https://b.test")
        assert request.options.level == "A"
        assert request.max_concurrent == 2

    def test_default_and_clamped_concurrency(self) -> None:
        assert parse_batch_request({"urls": ["https://a.test"]}).max_concurrent == 3
        explicit_null = {"urls": ["https://a.test"], "maxConcurrent": None}
        assert parse_batch_request(explicit_null).max_concurrent == 3
        assert (
            parse_batch_request({"urls": ["https://a.test"], "maxConcurrent": 20}).max_concurrent
            == 5
        )

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ({}, "URLs array is required"),
            ({"urls": []}, "URLs array is required"),
            ({"urls": "https://a.test"}, "URLs array is required"),
            ({"urls": ["https://a.test", "nope"]}, "Invalid URL format: nope"),
            ({"urls": ["https://a.test"], "maxConcurrent": "3"}, "maxConcurrent must be a number"),
        ],
    )
    def test_invalid(self, payload: dict, message: str) -> None:
        with pytest.raises(RequestValidationError, match=message):
            parse_batch_request(payload)

    def test_url_limit(self) -> None:
        urls = [f"https://site.test/{i}" for i in range(51)]
        with pytest.raises(RequestValidationError, match="Maximum 50 URLs"):
            parse_batch_request({"urls": urls})
        assert len(parse_batch_request({"urls": urls[:50]}).urls) == 50
