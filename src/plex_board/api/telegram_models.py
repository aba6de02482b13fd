"""Pydantic models for the parts of Telegram updates the bot reads."""

from pydantic import BaseModel, ConfigDict, Field


class _TelegramModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TelegramUser(_TelegramModel):
    """Sender of a message. Absent for anonymous channel posts."""

    id: int
    is_bot: bool = False
    username: str | None = None


class TelegramChat(_TelegramModel):
    """Chat a command was issued in; becomes the board destination."""

    id: int
    type: str
    title: str | None = None


class TelegramMessage(_TelegramModel):
    message_id: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None


class TelegramUpdate(_TelegramModel):
    """Webhook update carrying either a chat message or a channel post."""

    update_id: int
    message: TelegramMessage | None = None
    channel_post: TelegramMessage | None = None

    @property
    def effective_message(self) -> TelegramMessage | None:
        return self.message or self.channel_post
