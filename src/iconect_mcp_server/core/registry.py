#!/usr/bin/env python3
"""
Iconect MCP Server - Command Registry

Name-addressed table of command descriptors contributed by the capability
modules. Built once per configured session.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

CommandHandler = Callable[[Any], Awaitable[Dict[str, Any]]]


class CommandInput(BaseModel):
    """Base for command input contracts. Fields use camelCase aliases on the wire."""

    model_config = {"populate_by_name": True}


class EmptyInput(CommandInput):
    pass


@dataclass(frozen=True)
class CommandDescriptor:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: CommandHandler

    @property
    def input_schema(self) -> Dict[str, Any]:
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.setdefault("properties", {})
        schema.pop("title", None)
        return schema

    def validate(self, arguments: Optional[Mapping[str, Any]]) -> BaseModel:
        """Parse arguments against the input contract.

        Raises:
            ValidationError: with one "field: message" entry per problem in details
        """
        if arguments is not None and not isinstance(arguments, Mapping):
            problem = f"input: expected an object, got {type(arguments).__name__}"
            raise ValidationError(f"Invalid input for {self.name}: {problem}", details=[problem])
        try:
            return self.input_model.model_validate(dict(arguments or {}))
        except PydanticValidationError as e:
            problems = [
                f"{'.'.join(str(part) for part in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ValidationError(f"Invalid input for {self.name}: {'; '.join(problems)}", details=problems)

    def describe(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


class CommandRegistry:
    """Mapping from command name to descriptor, in registration order."""

    def __init__(self):
        self._commands: Dict[str, CommandDescriptor] = {}

    def register(self, descriptors: Iterable[CommandDescriptor]) -> None:
        for descriptor in descriptors:
            if descriptor.name in self._commands:
                raise ValueError(f"Duplicate command name: {descriptor.name}")
            self._commands[descriptor.name] = descriptor

    def get(self, name: str) -> Optional[CommandDescriptor]:
        return self._commands.get(name)

    def list(self) -> List[CommandDescriptor]:
        return list(self._commands.values())

    def names(self) -> List[str]:
        return list(self._commands)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)
