"""RequestComposer: builds the exact payload the gateway expects."""

from dataclasses import dataclass
from typing import Any, Iterable, Protocol

from ..models import Attachment, ExchangeConfig


@dataclass(frozen=True)
class Payload:
    """A composed request.

    Exactly one of ``content`` (bare-string form) or ``messages``
    (role-array form) is set.
    """

    model: str
    temperature: float
    content: str | None = None
    messages: tuple[dict[str, str], ...] | None = None
    stream: bool = True
    test_mode: bool = False

    @property
    def is_role_array(self) -> bool:
        return self.messages is not None

    @property
    def prompt(self) -> str | list[dict[str, str]]:
        """First argument of the gateway chat call."""
        if self.messages is not None:
            return [dict(m) for m in self.messages]
        return self.content or ""

    @property
    def user_content(self) -> str:
        if self.messages is not None:
            return self.messages[-1]["content"]
        return self.content or ""

    @property
    def system_prompt(self) -> str:
        if self.messages is not None and self.messages[0]["role"] == "system":
            return self.messages[0]["content"]
        return ""

    def options(self) -> dict[str, Any]:
        """Options passed alongside the prompt."""
        return {
            "model": self.model,
            "stream": self.stream,
            "temperature": self.temperature,
        }

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the payload."""
        data: dict[str, Any] = {}
        if self.messages is not None:
            data["messages"] = [dict(m) for m in self.messages]
        else:
            data["content"] = self.content
        data.update(self.options())
        if self.test_mode:
            data["test_mode"] = True
        return data


class IRequestComposer(Protocol):
    """Turns a draft plus attachments into a gateway payload."""

    def compose(
        self,
        message: str,
        attachments: Iterable[Attachment],
        config: ExchangeConfig,
    ) -> Payload:
        """Compose the payload for one exchange."""
        ...


def format_attachment(attachment: Attachment) -> str:
    """Render one attachment as a labeled fenced block."""
    body = attachment.content
    # A longer fence keeps backticks inside the file from closing the block
    fence = "```"
    while fence in body:
        fence += "`"
    if not body.endswith("\n"):
        body += "\n"
    return f"### File: {attachment.name}\n{fence}{attachment.ext}\n{body}{fence}"


class RequestComposer:
    """Flattens attachments into the user turn and picks the call form."""

    def compose(
        self,
        message: str,
        attachments: Iterable[Attachment],
        config: ExchangeConfig,
    ) -> Payload:
        user_content = self.flatten(message, attachments)
        system_prompt = (config.system_prompt or "").strip()

        if system_prompt:
            return Payload(
                model=config.model_id,
                temperature=config.temperature,
                messages=(
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ),
                test_mode=config.test_mode,
            )

        return Payload(
            model=config.model_id,
            temperature=config.temperature,
            content=user_content,
            test_mode=config.test_mode,
        )

    @staticmethod
    def flatten(message: str, attachments: Iterable[Attachment]) -> str:
        """User text followed by one fenced block per attachment."""
        blocks = [format_attachment(a) for a in attachments]
        if not blocks:
            return message
        parts = [message] if message else []
        parts.extend(blocks)
        return "\n\n".join(parts)
