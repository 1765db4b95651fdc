"""
Form component patterns.

Detects all types of form elements:
- Input fields (text, email, tel, number, password, date, url)
- Textarea and rich-text editors
- Select/Dropdown
- Checkbox and radio buttons, radio groups
- Form containers and multi-step forms
- File upload
- Search bars
"""

from __future__ import annotations

import re

from pagelens.dom import (
    DOMNode,
    any_of,
    attr_contains,
    attr_equals,
    class_contains,
    input_type,
    input_type_is,
    role_is,
    tag_in,
)
from pagelens.recognizer.models import ComponentType as T
from pagelens.recognizer.patterns.base import (
    RecognitionPattern,
    class_text,
    count,
    has,
    is_checkbox,
    is_form_control,
    is_radio,
    pattern,
)
from pagelens.styles import ExtractedStyles

TEXT_LIKE_INPUT_TYPES = (
    "text",
    "search",
    "email",
    "tel",
    "number",
    "password",
    "url",
    "date",
    "time",
    "datetime-local",
    "month",
    "week",
    "color",
)

_STEP_NAVIGATION_RE = re.compile(r"next|previous|prev|continue|back")


def _input_of(*types: str):
    def predicate(styles: ExtractedStyles, el: DOMNode) -> bool:
        return input_type(el) in types

    return predicate


# ============================================================================
# INPUT FIELD PATTERNS
# ============================================================================

INPUT_PATTERNS: list[RecognitionPattern] = [
    pattern(T.INPUT, 95, 90, tags=["input"], css=_input_of(*TEXT_LIKE_INPUT_TYPES)),
    # Hidden inputs are rarely rendered
    pattern(T.INPUT, 50, 20, tags=["input"], css=_input_of("hidden")),
    pattern(T.INPUT, 85, 80, role="textbox"),
]

# ============================================================================
# TEXTAREA PATTERNS
# ============================================================================

TEXTAREA_PATTERNS: list[RecognitionPattern] = [
    pattern(T.TEXTAREA, 95, 95, tags=["textarea"]),
    pattern(
        T.TEXTAREA, 85, 85,
        css=lambda s, el: el.get("contenteditable").strip().lower() in ("true", "plaintext-only"),
    ),
    pattern(
        T.TEXTAREA, 80, 80,
        classes=["editor", "wysiwyg", "rich-text", "tinymce", "ckeditor", "quill"],
    ),
]

# ============================================================================
# SELECT/DROPDOWN PATTERNS
# ============================================================================


def _custom_dropdown(styles: ExtractedStyles, el: DOMNode) -> bool:
    has_button = has(el, any_of(tag_in("button"), role_is("button")))
    has_menu = has(
        el,
        any_of(role_is("menu"), role_is("listbox"), class_contains("menu", "options")),
    )
    return has_button and has_menu


SELECT_PATTERNS: list[RecognitionPattern] = [
    pattern(T.SELECT, 95, 95, tags=["select"]),
    pattern(T.SELECT, 85, 85, classes=["dropdown", "select", "picker"], css=_custom_dropdown),
    pattern(T.SELECT, 90, 90, classes=["select2", "chosen", "selectize", "nice-select"]),
    pattern(T.SELECT, 90, 90, role="combobox"),
    pattern(T.SELECT, 85, 85, role="listbox"),
]

# ============================================================================
# CHECKBOX / RADIO PATTERNS
# ============================================================================

CHECKBOX_PATTERNS: list[RecognitionPattern] = [
    pattern(T.CHECKBOX, 95, 95, tags=["input"], css=_input_of("checkbox")),
    pattern(
        T.CHECKBOX, 90, 90,
        classes=["checkbox", "check"],
        css=lambda s, el: has(el, is_checkbox),
    ),
    pattern(T.CHECKBOX, 90, 90, role="checkbox"),
    pattern(T.CHECKBOX, 85, 85, role="switch"),
]


def _radio_set(styles: ExtractedStyles, el: DOMNode) -> bool:
    return count(el, is_radio) >= 2


def _radios_share_name(styles: ExtractedStyles, el: DOMNode) -> bool:
    names = {radio.get("name") for radio in el.find_descendants(is_radio)}
    return count(el, is_radio) >= 2 and len(names) == 1 and "" not in names


RADIO_PATTERNS: list[RecognitionPattern] = [
    pattern(T.RADIO, 95, 95, tags=["input"], css=_input_of("radio")),
    pattern(
        T.RADIO, 90, 90,
        classes=["radio", "option"],
        css=lambda s, el: has(el, is_radio),
    ),
    pattern(T.RADIO, 90, 90, role="radio"),
]

RADIO_GROUP_PATTERNS: list[RecognitionPattern] = [
    pattern(T.RADIO_GROUP, 90, 90, role="radiogroup", css=_radio_set),
    pattern(
        T.RADIO_GROUP, 85, 85,
        classes=["radio-group", "radio-list", "radio-buttons", "btn-group-toggle"],
        css=_radio_set,
    ),
    pattern(T.RADIO_GROUP, 85, 80, tags=["fieldset"], css=_radios_share_name),
]

# ============================================================================
# FILE UPLOAD PATTERNS
# ============================================================================

FILE_UPLOAD_PATTERNS: list[RecognitionPattern] = [
    pattern(T.FILE_UPLOAD, 95, 95, tags=["input"], css=_input_of("file")),
    pattern(
        T.FILE_UPLOAD, 90, 90,
        classes=["file-upload", "dropzone", "file-drop", "upload"],
        css=lambda s, el: has(el, input_type_is("file")),
    ),
    pattern(T.FILE_UPLOAD, 90, 90, classes=["dropzone", "dz-", "filepond", "uppy"]),
]

# ============================================================================
# FORM CONTAINER PATTERNS
# ============================================================================


def _inputs_with_submit(styles: ExtractedStyles, el: DOMNode) -> bool:
    submits = count(
        el,
        any_of(
            lambda n: n.tag_name == "button" and attr_equals("type", "submit")(n),
            input_type_is("submit"),
        ),
    )
    return count(el, is_form_control) >= 2 and submits >= 1


def _has_step_sections(styles: ExtractedStyles, el: DOMNode) -> bool:
    has_steps = has(
        el,
        any_of(class_contains("step", "progress"), role_is("progressbar")),
    )
    sections = count(el, any_of(class_contains("step"), tag_in("section", "fieldset")))
    return has_steps and sections >= 2


def _has_step_navigation(styles: ExtractedStyles, el: DOMNode) -> bool:
    buttons = el.find_descendants(any_of(tag_in("button"), input_type_is("button")))
    navigable = any(
        _STEP_NAVIGATION_RE.search(f"{b.text} {b.get('value')} {class_text(b)}".lower())
        for b in buttons
    )
    return navigable and has(el, is_form_control)


FORM_PATTERNS: list[RecognitionPattern] = [
    pattern(T.FORM, 95, 100, tags=["form"]),
    pattern(T.FORM, 85, 85, css=_inputs_with_submit),
    pattern(
        T.FORM, 80, 80,
        classes=["form", "contact-form", "signup", "register", "login"],
        css=lambda s, el: has(el, any_of(tag_in("input", "textarea", "select"))),
    ),
    pattern(T.FORM, 90, 90, role="form"),
]

MULTI_STEP_FORM_PATTERNS: list[RecognitionPattern] = [
    pattern(T.FORM, 90, 95, classes=["wizard", "stepper", "multi-step", "step-form", "form-wizard"]),
    pattern(T.FORM, 85, 90, css=_has_step_sections),
    pattern(T.FORM, 75, 80, css=_has_step_navigation),
]

# ============================================================================
# SEARCH BAR PATTERNS
# ============================================================================


def _has_search_input(styles: ExtractedStyles, el: DOMNode) -> bool:
    return has(
        el,
        any_of(
            input_type_is("search"),
            lambda n: input_type_is("text")(n) and attr_contains("placeholder", "search")(n),
        ),
    )


SEARCH_BAR_PATTERNS: list[RecognitionPattern] = [
    pattern(T.SEARCH_BAR, 95, 90, role="search"),
    pattern(
        T.SEARCH_BAR, 90, 85,
        classes=["search", "search-form", "searchbar"],
        css=_has_search_input,
    ),
]

FORM_COMPONENT_PATTERNS: list[RecognitionPattern] = [
    *FORM_PATTERNS,
    *MULTI_STEP_FORM_PATTERNS,
    *FILE_UPLOAD_PATTERNS,
    *TEXTAREA_PATTERNS,
    *SELECT_PATTERNS,
    *CHECKBOX_PATTERNS,
    *RADIO_GROUP_PATTERNS,
    *RADIO_PATTERNS,
    *INPUT_PATTERNS,
    *SEARCH_BAR_PATTERNS,
]
