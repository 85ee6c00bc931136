"""Client for the hosted users/session service.

OAuth and session storage live in that service; this app only keeps the
opaque session token in a cookie and asks the service who it belongs to.
"""

import requests
from flask import current_app


class UsersServiceError(Exception):
    pass


def _base_url():
    return (current_app.config.get('USERS_SERVICE_API_URL') or '').rstrip('/')


def _headers(session_token=None):
    headers = {'x-api-key': current_app.config.get('USERS_SERVICE_API_KEY') or ''}
    if session_token:
        headers['Authorization'] = f'Bearer {session_token}'
    return headers


def _request(method, path, session_token=None, **kwargs):
    try:
        r = requests.request(method, f"{_base_url()}{path}", headers=_headers(session_token), timeout=15, **kwargs)
    except requests.RequestException as e:
        raise UsersServiceError(f"users service unreachable: {e}")
    return r


def get_oauth_redirect_url(provider='google'):
    r = _request('GET', f"/oauth/{provider}/redirect_url")
    if not r.ok:
        raise UsersServiceError(f"redirect url request failed: HTTP {r.status_code}")
    data = r.json()
    return data.get('redirect_url') or data.get('redirectUrl')


def exchange_code_for_session_token(code):
    r = _request('POST', '/sessions', json={'code': code})
    if not r.ok:
        raise UsersServiceError(f"code exchange failed: HTTP {r.status_code}")
    token = r.json().get('session_token')
    if not token:
        raise UsersServiceError("code exchange returned no session token")
    return token


def get_current_user(session_token):
    """Return the user dict for a session token, or None if it is not valid."""
    if not session_token:
        return None
    r = _request('GET', '/users/me', session_token=session_token)
    if r.status_code in (401, 403, 404):
        return None
    if not r.ok:
        raise UsersServiceError(f"user lookup failed: HTTP {r.status_code}")
    return r.json()


def delete_session(session_token):
    r = _request('DELETE', '/sessions', session_token=session_token)
    if not r.ok and r.status_code != 404:
        raise UsersServiceError(f"session delete failed: HTTP {r.status_code}")
