"""Text rendering of the session board."""

from html import escape

from plex_board.domain.sessions import Session, progress_bar

BOARD_TITLE = "📺 Plex Activity"
EMPTY_TEXT = "No active sessions"
MESSAGE_LIMIT = 4096

_STATE_ICONS = {"playing": "▶️", "paused": "⏸", "buffering": "⏳"}


def render_board(sessions: list[Session], server_names: list[str]) -> str:
    """Render every session, or a placeholder when nothing is playing."""
    if not sessions:
        return "\n".join(
            [
                f"<b>{escape(BOARD_TITLE)}</b>",
                EMPTY_TEXT,
                f"<i>{escape(footer_text(server_names))}</i>",
            ]
        )
    blocks = [render_session(session) for session in sessions]
    return _fit(blocks)


def footer_text(server_names: list[str]) -> str:
    """Name the lone server, or count them when there are several."""
    if len(server_names) == 1:
        return server_names[0]
    return f"{len(server_names)} servers"


def describe_session(session: Session) -> list[str]:
    """Return the plain-text body lines for one session."""
    bar = progress_bar(session)
    if session.media_type == "episode":
        show = session.grandparent_title or "Unknown Show"
        season = session.parent_index or 0
        episode = session.index or 0
        return [show, f"S{season}·E{episode} - {session.title}", bar]
    if session.media_type == "movie":
        year = f" ({session.year})" if session.year is not None else ""
        return [f"{session.title}{year}", bar]
    if session.media_type == "track":
        artist = session.grandparent_title or "Unknown Artist"
        album = session.parent_title or "Unknown Album"
        return [f"{artist} - {session.title}", album, bar]
    return [session.title, bar]


def render_session(session: Session) -> str:
    state = session.player_state
    icon = _STATE_ICONS.get(state, "⏹")
    heading = f"{icon} <b>{escape(session.user_name)}</b> {escape(state)}"
    *body, bar = describe_session(session)
    headline, *details = body
    lines = [heading, f"<b>{escape(headline)}</b>"]
    lines.extend(escape(line) for line in details)
    lines.append(f"<code>{escape(bar)}</code>")
    footer = escape(session.server_name)
    if session.art_url:
        footer = f'<a href="{escape(session.art_url, quote=True)}">🖼</a> {footer}'
    lines.append(f"<i>{footer}</i>")
    return "\n".join(lines)


def _fit(blocks: list[str]) -> str:
    """Join blocks, dropping trailing ones that overflow a Telegram message."""
    separator = "\n\n"
    kept = list(blocks)
    text = separator.join(kept)
    while len(text) > MESSAGE_LIMIT and len(kept) > 1:
        kept.pop()
        text = separator.join([*kept, f"…and {len(blocks) - len(kept)} more"])
    return text
