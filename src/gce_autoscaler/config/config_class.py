import argparse
import dataclasses
import tomllib
import typing
from typing import Any, Dict, Optional, Sequence, Type, TypeVar

from gce_autoscaler.utility.formatter import camelcase_dict, snakecase_dict

T = TypeVar("T", bound="ConfigClass")


class ConfigClass:
    """
    Base class for dataclass configuration sections.

    Field metadata drives the command line: ``long`` replaces the default flag name, ``short`` adds a short flag,
    ``help``, ``choices`` and ``type`` are passed to argparse as is. Fields typed as another ConfigClass are nested
    sections, their fields are flattened onto the same command line and can be given in the TOML file either flat or
    as a sub-table named after the field.

    Precedence is command line, then TOML file, then dataclass default.
    """

    @classmethod
    def parse(cls: Type[T], program_name: str, section: str, argv: Optional[Sequence[str]] = None) -> T:
        parser = argparse.ArgumentParser(program_name)
        parser.add_argument("--config", "-c", type=str, default=None, help="Path to the TOML configuration file.")
        cls._add_arguments(parser)

        args = parser.parse_args(argv)

        file_values: Dict[str, Any] = {}
        if args.config is not None:
            with open(args.config, "rb") as f:
                file_values = tomllib.load(f).get(section, {})

        command_line_values = {k: v for k, v in vars(args).items() if k != "config" and v is not None}

        try:
            return cls._build(file_values, command_line_values)
        except (TypeError, ValueError) as e:
            parser.error(str(e))

    def to_dict(self) -> Dict[str, Any]:
        """external (camelCase JSON) representation of this section"""
        return camelcase_dict(dataclasses.asdict(self))  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        return cls._from_snake(snakecase_dict(data))

    @classmethod
    def _add_arguments(cls, parser: argparse.ArgumentParser) -> None:
        hints = typing.get_type_hints(cls)
        for field in dataclasses.fields(cls):  # type: ignore[arg-type]
            hint = hints[field.name]
            if _is_config_class(hint):
                hint._add_arguments(parser)
                continue

            metadata = dict(field.metadata)
            names = [metadata.get("long", f"--{field.name.replace('_', '-')}")]
            if "short" in metadata:
                names.append(metadata["short"])

            kwargs: Dict[str, Any] = dict(dest=field.name, default=None)

            help_text = metadata.get("help", "")
            if field.default is not dataclasses.MISSING:
                help_text = f"{help_text} (default: {field.default})".strip()
            kwargs["help"] = help_text

            if "choices" in metadata:
                kwargs["choices"] = metadata["choices"]

            value_type = _unwrap_optional(hint)
            if value_type is bool:
                kwargs["action"] = argparse.BooleanOptionalAction
            elif _is_sequence(value_type):
                kwargs["nargs"] = "*"
                kwargs["type"] = metadata.get("type", typing.get_args(value_type)[0])
            else:
                kwargs["type"] = metadata.get("type", value_type)

            parser.add_argument(*names, **kwargs)

    @classmethod
    def _build(cls: Type[T], file_values: Dict[str, Any], command_line_values: Dict[str, Any]) -> T:
        hints = typing.get_type_hints(cls)
        kwargs: Dict[str, Any] = {}
        for field in dataclasses.fields(cls):  # type: ignore[arg-type]
            hint = hints[field.name]
            if _is_config_class(hint):
                nested_file_values = {**file_values, **file_values.get(field.name, {})}
                kwargs[field.name] = hint._build(nested_file_values, command_line_values)
                continue

            if field.name in command_line_values:
                value = command_line_values[field.name]
            elif field.name in file_values:
                value = file_values[field.name]
            elif field.name.replace("_", "-") in file_values:
                value = file_values[field.name.replace("_", "-")]
            elif field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING:
                raise ValueError(f"missing required configuration value: {field.name}")
            else:
                continue

            kwargs[field.name] = _coerce(hint, value)

        return cls(**kwargs)

    @classmethod
    def _from_snake(cls: Type[T], data: Dict[str, Any]) -> T:
        hints = typing.get_type_hints(cls)
        kwargs: Dict[str, Any] = {}
        for field in dataclasses.fields(cls):  # type: ignore[arg-type]
            if field.name not in data:
                continue

            hint = hints[field.name]
            value = data[field.name]
            if _is_config_class(hint):
                kwargs[field.name] = hint._from_snake(value)
            else:
                kwargs[field.name] = _coerce(hint, value)

        return cls(**kwargs)


def _is_config_class(hint: Any) -> bool:
    return isinstance(hint, type) and issubclass(hint, ConfigClass)


def _unwrap_optional(hint: Any) -> Any:
    if typing.get_origin(hint) is typing.Union:
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _is_sequence(hint: Any) -> bool:
    return typing.get_origin(hint) in (tuple, list)


def _coerce(hint: Any, value: Any) -> Any:
    value_type = _unwrap_optional(hint)
    if value is not None and typing.get_origin(value_type) is tuple:
        return tuple(value)
    if value is not None and typing.get_origin(value_type) is list:
        return list(value)
    return value
