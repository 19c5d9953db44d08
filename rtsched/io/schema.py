"""JSON schema for configuration structure validation."""

from __future__ import annotations

CONFIG_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Real-Time Scheduling Config",
    "type": "object",
    "required": ["version", "tasks", "scheduler"],
    "properties": {
        "version": {"type": "string"},
        "tasks": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/$defs/Task"},
        },
        "scheduler": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "params": {
                    "type": "object",
                    "default": {},
                    "properties": {
                        "miss_policy": {"type": "string", "enum": ["deadline", "next_release"]},
                        "abort_on_miss": {"type": "boolean"},
                        "event_id_mode": {
                            "type": "string",
                            "enum": ["deterministic", "random", "seeded_random"],
                        },
                    },
                },
            },
            "additionalProperties": False,
        },
        "sim": {
            "type": "object",
            "properties": {
                "horizon": {"type": "integer", "exclusiveMinimum": 0},
                "seed": {"type": "integer"},
            },
            "additionalProperties": False,
        },
    },
    "$defs": {
        "Task": {
            "type": "object",
            "required": ["id", "execution_time", "period"],
            "properties": {
                "id": {"type": "string", "minLength": 1},
                "execution_time": {"type": "integer", "exclusiveMinimum": 0},
                "period": {"type": "integer", "exclusiveMinimum": 0},
                "deadline": {"type": ["integer", "null"], "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}
