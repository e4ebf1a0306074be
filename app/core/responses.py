"""Client-type detection and response shaping"""
from html import escape
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

API_CLIENT_HEADER = "x-api-client"


def wants_json(request: Request) -> bool:
    """
    True for API clients: XHR requests, requests carrying the explicit
    API-client marker, or an Accept header that mentions JSON.
    """
    if request.headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return True
    if request.headers.get(API_CLIENT_HEADER):
        return True
    return "json" in request.headers.get("accept", "").lower()


def is_api_client(request: Request) -> bool:
    """Explicit API-client marker (decides token vs session on login)"""
    return bool(request.headers.get(API_CLIENT_HEADER))


def success_response(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data)},
    )


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


def redirect(url: str) -> RedirectResponse:
    # 303 so browsers follow POST/PUT/DELETE with a GET
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def error_page(message: str, status_code: int) -> HTMLResponse:
    """Minimal HTML error page for browser clients"""
    body = (
        "<!doctype html><html><head><title>Error</title></head>"
        f"<body><h1>Error {status_code}</h1><p>{escape(message)}</p>"
        '<p><a href="/">Back to home</a></p></body></html>'
    )
    return HTMLResponse(content=body, status_code=status_code)


def shape(request: Request, data: Any, browser_redirect: str, status_code: int = status.HTTP_200_OK):
    """JSON envelope for API clients, redirect for browsers"""
    if wants_json(request):
        return success_response(data, status_code=status_code)
    return redirect(browser_redirect)
