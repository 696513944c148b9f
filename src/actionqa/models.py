"""Centralized engine constants: timings, retry budgets, key codes and event names."""

import enum

# Element resolution
DEFAULT_RESOLVE_DELAY_MS = 1000
DEFAULT_MAX_TRIES = 10

# Pause before each step of a composite action
DEFAULT_STEP_DELAY_MS = 200

# Attribute written on every resolved element so the DOM can be inspected later
DEFAULT_TEST_ID_ATTRIBUTE = "test-id"
INPUT_ID_ATTRIBUTE = "input-id"

# Tags that accept a value directly; anything else is searched for an <input>
EDITABLE_TAGS = ("INPUT", "SELECT", "TEXTAREA")

# Default viewport for browser-backed runs
DEFAULT_VIEWPORT = (1280, 720)


class TestSpeed(enum.IntEnum):
    """Step delay presets, in milliseconds."""

    __test__ = False  # keep pytest from collecting this enum

    SLOW = 2000
    NORMAL = 1000
    FAST = 200


# Key definitions for synthetic keydown events: (key, code, keyCode)
KEYS = {
    "escape": ("Escape", "Escape", 27),
    "down": ("ArrowDown", "ArrowDown", 40),
    "tab": ("Tab", "Tab", 9),
}


class EventName(str, enum.Enum):
    """Channels published on the event bus."""

    START = "start"
    END = "end"
    ACTION_UPDATE = "action-update"
    SAVE_VALUE = "save-value"
    REGISTER_TEST = "register-test"
    TEST_STARTED = "test-started"
    TEST_PASSED = "test-passed"
    TEST_FAILED = "test-failed"
    TEST_END = "test-end"
