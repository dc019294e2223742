"""Control-channel command models."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class CommandModel(BaseModel):
    """Base for commands; fields arrive in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class AuthCommand(CommandModel):
    type: Literal["auth"]
    token: str


class SendCommand(CommandModel):
    type: Literal["send"]
    to: str
    text: str


class QuizStartCommand(CommandModel):
    type: Literal["quiz_start"]
    chat_id: str
    question: str
    answer: str
    reply_to_message_id: str | None = None


class QuizEndCommand(CommandModel):
    type: Literal["quiz_end"]
    chat_id: str | None = None


class QuizStatusCommand(CommandModel):
    type: Literal["quiz_status"]
    chat_id: str | None = None


Command = Annotated[
    Union[SendCommand, QuizStartCommand, QuizEndCommand, QuizStatusCommand],
    Field(discriminator="type"),
]

COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)

KNOWN_COMMANDS = frozenset({"send", "quiz_start", "quiz_end", "quiz_status"})
