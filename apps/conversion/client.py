"""
Conversion client state machine.

Drives the format toggle on an article page:
- Idle (original) --click--> Loading --success--> Converted
- Converted --click--> Loading --(local, no request)--> Idle
- Loading --failure--> Error --retry--> Loading

States:
    idle → loading → converted
             ↓  ↑        ↓
           error      loading → idle

Only one operation runs at a time: clicks while loading are ignored,
nothing is queued and nothing is cancelled. Reverting restores the original
content captured at page load, never re-fetched.

Usage:
    async with aiohttp.ClientSession() as session:
        client = await open_article_page(session, "https://example.com/articles/42/")
        await client.click()          # convert to AP
        await client.click()          # revert to original
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Set
from urllib.parse import urljoin

import aiohttp
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_TIMEOUT = 65.0
DEFAULT_REVERT_DELAY = 0.3
LOADING_MESSAGE_INTERVAL = 2.5

LABEL_CONVERT = 'Convert to AP Format'
LABEL_REVERT = 'Revert to Original'

LOADING_MESSAGES = [
    'Analyzing article structure...',
    'Applying AP style rules...',
    'Restructuring paragraphs...',
    'Adding proper attribution...',
    'Formatting quotes and sources...',
    'Finalizing AP conversion...',
]

ERROR_TIMEOUT = 'Conversion timed out. Please try again.'
ERROR_SERVER = 'Server error. Please try again later.'
ERROR_CONNECTION = 'Connection failed. Check your internet connection.'
ERROR_NETWORK = 'Network error occurred'
ERROR_CONVERSION = 'Conversion failed'

REQUEST_TOKEN_COOKIE = 'csrftoken'


class ClientState(Enum):
    """Display states of the format toggle."""
    IDLE = 'idle'
    LOADING = 'loading'
    CONVERTED = 'converted'
    ERROR = 'error'


VALID_TRANSITIONS: Dict[ClientState, Set[ClientState]] = {
    ClientState.IDLE: {ClientState.LOADING},
    ClientState.LOADING: {ClientState.CONVERTED, ClientState.IDLE, ClientState.ERROR},
    ClientState.CONVERTED: {ClientState.LOADING},
    ClientState.ERROR: {ClientState.LOADING},
}


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: ClientState
    to_state: ClientState
    timestamp: datetime
    error: Optional[str] = None


class TransitionError(Exception):
    """Raised when a state transition is invalid."""
    pass


# =============================================================================
# Transport
# =============================================================================

class TransportError(Exception):
    """The convert request never produced an HTTP response."""


class TransportTimeout(TransportError):
    pass


class TransportConnectionError(TransportError):
    pass


@dataclass
class TransportResponse:
    status: int
    data: Optional[Dict[str, Any]] = None


class Transport(Protocol):
    async def convert(self, article_id: int, fmt: str) -> TransportResponse:
        ...


class AiohttpTransport:
    """
    Posts convert calls with the page's request token.

    The session must carry the cookies set by the article page.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        convert_url: str,
        csrf_token: str,
        referer: Optional[str] = None,
    ):
        self.session = session
        self.convert_url = convert_url
        self.csrf_token = csrf_token
        self.referer = referer

    async def convert(self, article_id: int, fmt: str) -> TransportResponse:
        headers = {'X-CSRFToken': self.csrf_token}
        if self.referer:
            headers['Referer'] = self.referer

        try:
            async with self.session.post(
                self.convert_url,
                json={'article_id': article_id, 'format': fmt},
                headers=headers,
            ) as response:
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    data = None
                if not isinstance(data, dict):
                    data = None
                return TransportResponse(status=response.status, data=data)
        except asyncio.TimeoutError as exc:
            raise TransportTimeout(str(exc)) from exc
        except aiohttp.ClientConnectionError as exc:
            raise TransportConnectionError(str(exc)) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(str(exc)) from exc


# =============================================================================
# Display
# =============================================================================

class ContentDisplay(Protocol):
    async def swap(self, html: str) -> None:
        """Replace the article content with a transition and scroll it into view."""
        ...

    def show_loading(self, message: str) -> None:
        ...

    def hide_loading(self) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...

    def hide_error(self) -> None:
        ...

    def set_toggle(self, label: str, converted: bool) -> None:
        ...


@dataclass
class InMemoryDisplay:
    """
    Display region kept in memory.

    ``fade`` is the duration of each half of the swap transition.
    """
    content: str = ''
    fade: float = 0.0
    loading_visible: bool = False
    loading_text: str = ''
    error_message: Optional[str] = None
    toggle_label: str = LABEL_CONVERT
    toggle_converted: bool = False
    button_disabled: bool = False
    scroll_count: int = 0
    loading_texts_shown: List[str] = field(default_factory=list)

    async def swap(self, html: str) -> None:
        if self.fade:
            await asyncio.sleep(self.fade)
        self.content = html
        if self.fade:
            await asyncio.sleep(self.fade)
        self.scroll_count += 1

    def show_loading(self, message: str) -> None:
        self.loading_visible = True
        self.loading_text = message
        self.loading_texts_shown.append(message)
        self.error_message = None
        self.button_disabled = True

    def hide_loading(self) -> None:
        self.loading_visible = False
        self.button_disabled = False

    def show_error(self, message: str) -> None:
        self.loading_visible = False
        self.error_message = message
        self.button_disabled = False

    def hide_error(self) -> None:
        self.error_message = None

    def set_toggle(self, label: str, converted: bool) -> None:
        self.toggle_label = label
        self.toggle_converted = converted


# =============================================================================
# Client
# =============================================================================

def error_message_for(response: Optional[TransportResponse] = None,
                      exc: Optional[Exception] = None) -> str:
    """Message shown to the visitor for a failed convert call."""
    if isinstance(exc, (TransportTimeout, asyncio.TimeoutError)):
        return ERROR_TIMEOUT
    if isinstance(exc, TransportConnectionError):
        return ERROR_CONNECTION
    if exc is not None:
        return ERROR_NETWORK

    if response.data and response.data.get('error'):
        return str(response.data['error'])
    if response.status == 500:
        return ERROR_SERVER
    if 200 <= response.status < 300:
        return ERROR_CONVERSION
    return ERROR_NETWORK


class ConversionClient:
    """
    Format toggle for one article.

    Features:
    - Validates state transitions
    - Tracks transition history
    - Rotates loading messages while a request is in flight
    - Ignores clicks while busy
    """

    def __init__(
        self,
        article_id: int,
        original_content: str,
        transport: Transport,
        display: Optional[ContentDisplay] = None,
        timeout: float = DEFAULT_CLIENT_TIMEOUT,
        revert_delay: float = DEFAULT_REVERT_DELAY,
        loading_interval: float = LOADING_MESSAGE_INTERVAL,
    ):
        self.article_id = article_id
        self.original_content = original_content
        self.transport = transport
        self.display = display if display is not None else InMemoryDisplay(content=original_content)
        self.timeout = timeout
        self.revert_delay = revert_delay
        self.loading_interval = loading_interval

        self._state = ClientState.IDLE
        self._in_flight = False
        self._error: Optional[str] = None
        self._history: List[StateTransition] = []
        self.requests_sent = 0

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def error(self) -> Optional[str]:
        """Message of the current Error state, None otherwise."""
        return self._error

    @property
    def current_format(self) -> str:
        return 'ap' if self._state == ClientState.CONVERTED else 'original'

    @property
    def history(self) -> List[StateTransition]:
        return self._history.copy()

    def can_transition_to(self, target: ClientState) -> bool:
        return target in VALID_TRANSITIONS.get(self._state, set())

    def _transition(self, target: ClientState, error: Optional[str] = None) -> None:
        if not self.can_transition_to(target):
            raise TransitionError(
                f"Invalid transition: {self._state.value} → {target.value}"
            )
        self._history.append(StateTransition(
            from_state=self._state,
            to_state=target,
            timestamp=datetime.now(timezone.utc),
            error=error,
        ))
        logger.debug("Article %s: %s → %s", self.article_id, self._state.value, target.value)
        self._state = target
        self._error = error

    async def click(self) -> None:
        """Handle a click on the toggle button."""
        if self._in_flight:
            logger.debug("Article %s: busy, ignoring click", self.article_id)
            return

        if self._state == ClientState.CONVERTED:
            await self._revert()
        else:
            await self._convert()

    async def retry(self) -> None:
        """Handle a click on the error's retry link."""
        if self._in_flight or self._state != ClientState.ERROR:
            return
        self.display.hide_error()
        await self._convert()

    async def _convert(self) -> None:
        # Set before the first await so a second click sees it.
        self._in_flight = True
        try:
            self._transition(ClientState.LOADING)
            self.display.show_loading(LOADING_MESSAGES[0])
            rotator = asyncio.ensure_future(self._rotate_loading_messages())
            try:
                content, message = await self._request()
            finally:
                rotator.cancel()
                await asyncio.gather(rotator, return_exceptions=True)

            if content is None:
                self._transition(ClientState.ERROR, error=message)
                self.display.show_error(message)
                logger.info("Article %s: conversion failed: %s", self.article_id, message)
                return

            await self.display.swap(content)
            self.display.set_toggle(LABEL_REVERT, converted=True)
            self.display.hide_loading()
            self.display.hide_error()
            self._transition(ClientState.CONVERTED)
            self._track_usage('ap')
        finally:
            self._in_flight = False

    async def _request(self):
        """Return (content, None) on success or (None, message) on failure."""
        self.requests_sent += 1
        try:
            response = await asyncio.wait_for(
                self.transport.convert(self.article_id, 'ap'),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, TransportError) as exc:
            return None, error_message_for(exc=exc)
        except Exception as exc:
            # e.g. RuntimeError from a closed session
            logger.exception("Article %s: convert request failed", self.article_id)
            return None, error_message_for(exc=exc)

        if 200 <= response.status < 300 and response.data and response.data.get('content'):
            return response.data['content'], None
        return None, error_message_for(response=response)

    async def _revert(self) -> None:
        self._in_flight = True
        try:
            self._transition(ClientState.LOADING)
            self.display.show_loading(LOADING_MESSAGES[0])
            await asyncio.sleep(self.revert_delay)
            await self.display.swap(self.original_content)
            self.display.set_toggle(LABEL_CONVERT, converted=False)
            self.display.hide_loading()
            self.display.hide_error()
            self._transition(ClientState.IDLE)
            self._track_usage('original')
        finally:
            self._in_flight = False

    async def _rotate_loading_messages(self) -> None:
        index = 0
        while True:
            await asyncio.sleep(self.loading_interval)
            index = (index + 1) % len(LOADING_MESSAGES)
            self.display.show_loading(LOADING_MESSAGES[index])

    def _track_usage(self, fmt: str) -> None:
        logger.info(
            "Format conversion: %s", fmt,
            extra={'format_type': fmt, 'article_id': self.article_id},
        )


# =============================================================================
# Page bootstrap
# =============================================================================

@dataclass(frozen=True)
class PageBootstrap:
    """Everything the client needs from a rendered article page."""
    article_id: int
    original_content: str
    convert_url: str
    client_timeout: float = DEFAULT_CLIENT_TIMEOUT


def parse_article_page(html: str, page_url: str = '') -> PageBootstrap:
    """
    Read the toggle widget and the embedded original content from a page.

    Raises ValueError when the page carries no format toggle.
    """
    soup = BeautifulSoup(html, 'html.parser')

    button = soup.find(id='format-toggle-btn')
    if button is None or not button.get('data-post-id'):
        raise ValueError("Page has no format toggle button")

    script = soup.find('script', id='original-content')
    if script is None or script.string is None:
        raise ValueError("Page has no original content")
    original_content = json.loads(script.string)

    widget = soup.find(id='format-converter-widget')
    convert_url = (widget.get('data-convert-url') if widget else None) or '/api/conversion/convert/'
    timeout = (widget.get('data-client-timeout') if widget else None) or DEFAULT_CLIENT_TIMEOUT

    return PageBootstrap(
        article_id=int(button['data-post-id']),
        original_content=original_content,
        convert_url=urljoin(page_url, convert_url),
        client_timeout=float(timeout),
    )


async def open_article_page(
    session: aiohttp.ClientSession,
    page_url: str,
    display: Optional[ContentDisplay] = None,
) -> ConversionClient:
    """Load an article page and return a client bound to its toggle."""
    async with session.get(page_url) as response:
        response.raise_for_status()
        html = await response.text()

    bootstrap = parse_article_page(html, page_url)

    token = next(
        (cookie.value for cookie in session.cookie_jar if cookie.key == REQUEST_TOKEN_COOKIE),
        None,
    )
    if not token:
        raise ValueError("Page did not set a request token cookie")

    transport = AiohttpTransport(
        session,
        bootstrap.convert_url,
        csrf_token=token,
        referer=page_url,
    )
    return ConversionClient(
        article_id=bootstrap.article_id,
        original_content=bootstrap.original_content,
        transport=transport,
        display=display,
        timeout=bootstrap.client_timeout,
    )
