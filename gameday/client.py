"""HTTP client for the game backing store, plus the read-only entity cache seam."""

import logging
from typing import Any, Optional, Protocol

import requests
from pydantic import ValidationError as SchemaError

from .cancellation import CancellationToken, check
from .config import get_api_base_url, get_api_token, get_config
from .constants import EVENT_COLLECTIONS
from .errors import AuthenticationError, NotFoundError, TransientNetworkError
from .models import Game, Player, RosterRecord
from .schemas import EVENT_SCHEMAS, GameSchema, RosterRecordSchema

logger = logging.getLogger('gameday.client')

BODY_EXCERPT_CHARS = 500

# Response envelope key per event type for single-event responses
EVENT_ENVELOPES = {
    'goal': 'goal',
    'card': 'card',
    'substitution': 'substitution',
}


def _auth_headers(token: str) -> dict[str, str]:
    return {'Authorization': f'Bearer {token}'}


def _body_excerpt(resp: requests.Response) -> str:
    text = resp.text or ''
    return text[:BODY_EXCERPT_CHARS] or '<no-body>'


def _raise_for_response(method: str, url: str, resp: requests.Response) -> None:
    """Map a non-2xx response onto the engine's error types."""
    detail = f'{method} {url} -> {resp.status_code} :: {_body_excerpt(resp)}'
    if resp.status_code in (401, 403):
        raise AuthenticationError(detail)
    if resp.status_code == 404:
        raise NotFoundError(detail)
    raise TransientNetworkError(detail, status_code=resp.status_code)


def _unwrap(body: Any, *keys: str) -> Any:
    """Strip the response envelope: {'data': ...}, {'goal': ...} etc."""
    if isinstance(body, dict):
        for key in keys:
            if key in body:
                return body[key]
    return body


class GameStoreClient:
    """
    Bearer-authenticated client for the game endpoints.

    Every method accepts a cancel_token; the token is checked before the
    request goes out and again before the response is parsed, so a session
    torn down mid-request gets AbortError instead of stale data.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or get_api_base_url()).rstrip('/')
        self.token = token if token is not None else get_api_token()
        self.timeout = timeout if timeout is not None else get_config().request_timeout
        self.session = session or requests.Session()

    # ----- transport -----

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Any:
        check(cancel_token)
        mutating = method != 'GET'
        if mutating and not self.token:
            raise AuthenticationError(f'No bearer token available for {method} {path}')

        headers = _auth_headers(self.token) if self.token else {}
        url = f'{self.base_url}/{path.lstrip("/")}'
        logger.debug(f'{method} {url}')

        try:
            resp = self.session.request(method, url, json=json, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f'{method} {url} failed: {e}')
            raise TransientNetworkError(f'{method} {url} failed: {e}') from e

        check(cancel_token)

        if not resp.ok:
            logger.error(f'{method} {url} returned {resp.status_code}')
            _raise_for_response(method, url, resp)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TransientNetworkError(
                f'{method} {url} returned malformed response: {_body_excerpt(resp)}',
                status_code=resp.status_code,
            ) from e

    @staticmethod
    def _parse(schema, data: Any, what: str):
        try:
            return schema.model_validate(data)
        except SchemaError as e:
            logger.error(f'Malformed {what} in response: {e}')
            raise TransientNetworkError(f'malformed response: {what}: {e}') from e

    # ----- games -----

    def get_game(self, game_id: str, cancel_token: Optional[CancellationToken] = None) -> Game:
        """GET /games/{id}"""
        body = self._request('GET', f'games/{game_id}', cancel_token=cancel_token)
        return self._parse(GameSchema, _unwrap(body, 'data', 'game'), 'game').to_model()

    def save_draft(self, game_id: str, draft: dict, cancel_token: Optional[CancellationToken] = None) -> None:
        """PUT /games/{id}/draft - full replace of the lineup or report draft."""
        self._request('PUT', f'games/{game_id}/draft', json=draft, cancel_token=cancel_token)

    def start_game(
        self, game_id: str, payload: dict, cancel_token: Optional[CancellationToken] = None
    ) -> list[RosterRecord]:
        """
        POST /games/{id}/start-game

        Returns:
            Committed roster records echoed by the store (may be empty)
        """
        body = self._request('POST', f'games/{game_id}/start-game', json=payload, cancel_token=cancel_token)
        records = body.get('gameRosters') if isinstance(body, dict) else None
        return [self._parse(RosterRecordSchema, r, 'roster record').to_model() for r in records or []]

    def submit_report(self, game_id: str, payload: dict, cancel_token: Optional[CancellationToken] = None) -> None:
        """POST /games/{id}/submit-report"""
        self._request('POST', f'games/{game_id}/submit-report', json=payload, cancel_token=cancel_token)

    def get_match_timeline(self, game_id: str, cancel_token: Optional[CancellationToken] = None) -> list[dict]:
        """GET /games/{id}/match-timeline - server-merged view, returned raw."""
        body = self._request('GET', f'games/{game_id}/match-timeline', cancel_token=cancel_token)
        timeline = _unwrap(body, 'timeline', 'data')
        return list(timeline or [])

    # ----- match events -----

    def list_events(self, game_id: str, event_type: str, cancel_token: Optional[CancellationToken] = None) -> list:
        """GET /games/{id}/{goals|cards|substitutions}"""
        collection = EVENT_COLLECTIONS[event_type]
        body = self._request('GET', f'games/{game_id}/{collection}', cancel_token=cancel_token)
        items = _unwrap(body, collection, 'data') or []
        schema = EVENT_SCHEMAS[event_type]
        return [self._parse(schema, item, event_type).to_model() for item in items]

    def create_event(self, game_id: str, event, cancel_token: Optional[CancellationToken] = None):
        """POST /games/{id}/{collection}; returns the stored event with its id."""
        return self._write_event('POST', f'games/{game_id}/{EVENT_COLLECTIONS[event.event_type]}', event, cancel_token)

    def update_event(self, game_id: str, event, cancel_token: Optional[CancellationToken] = None):
        """PUT /games/{id}/{collection}/{eventId}"""
        path = f'games/{game_id}/{EVENT_COLLECTIONS[event.event_type]}/{event.id}'
        return self._write_event('PUT', path, event, cancel_token)

    def delete_event(
        self, game_id: str, event_type: str, event_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> None:
        """DELETE /games/{id}/{collection}/{eventId}"""
        self._request(
            'DELETE', f'games/{game_id}/{EVENT_COLLECTIONS[event_type]}/{event_id}', cancel_token=cancel_token
        )

    def _write_event(self, method: str, path: str, event, cancel_token):
        schema = EVENT_SCHEMAS[event.event_type]
        payload = schema.from_model(event).to_wire(exclude={'id'})
        body = self._request(method, path, json=payload, cancel_token=cancel_token)
        stored = _unwrap(body, EVENT_ENVELOPES[event.event_type], 'data')
        if not stored:
            # Store acknowledged without echoing; keep what was sent
            return event
        return self._parse(schema, stored, event.event_type).to_model()


class EntityCache(Protocol):
    """Collections provided by the host application."""

    def get_players(self, team_id: str) -> list[Player]:
        ...

    def get_game_rosters(self, game_id: str) -> list[RosterRecord]:
        ...

    def set_game_rosters(self, game_id: str, records: list[RosterRecord]) -> None:
        ...


class InMemoryEntityCache:
    """EntityCache backed by plain dicts (tests, scripts)."""

    def __init__(
        self,
        players: Optional[dict[str, list[Player]]] = None,
        rosters: Optional[dict[str, list[RosterRecord]]] = None,
    ):
        self.players = players or {}
        self.rosters = rosters or {}

    def get_players(self, team_id: str) -> list[Player]:
        return list(self.players.get(team_id, []))

    def get_game_rosters(self, game_id: str) -> list[RosterRecord]:
        return list(self.rosters.get(game_id, []))

    def set_game_rosters(self, game_id: str, records: list[RosterRecord]) -> None:
        self.rosters[game_id] = list(records)
