"""Parse skill markdown documents into SkillRecords, and render them back.

A skill document looks like::

    # Caching Patterns

    > One line summary

    **Category:** backend | **Version:** 1.0.0 | **Tags:** cache, redis

    ## Identity
    ## Expertise Areas
    ## Patterns
    ## Anti-Patterns
    ## Sharp Edges (Gotchas)
    ## Collaboration
    ## Validations

Only the H1 title is required. Every other section is optional and an absent
section yields an empty collection.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator

import yaml

from spawnerskills.core.exceptions import SkillParseError
from spawnerskills.core.skill_def import (
    AntiPattern,
    HandoffRule,
    ParseIssue,
    Pattern,
    Severity,
    SharpEdge,
    SkillRecord,
    ValidationRule,
    split_keywords,
)
from spawnerskills.utils.def_loader import parse_frontmatter, slugify, split_frontmatter

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*$")
FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})")
LABEL_RE = re.compile(r"^\*\*(?P<label>[^*]+?)(?::\*\*|\*\*:)\s*(?P<rest>.*)$")
META_RE = re.compile(r"\*\*(?P<key>[^*:]+):\*\*")
SEVERITY_RE = re.compile(r"^\[(?P<severity>[^\]]*)\]\s*(?P<title>.*)$")
BULLET_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?P<text>.*)$")
REF_RE = re.compile(
    r"^(?:\*\*(?P<bold>[^*]+)\*\*|`(?P<code>[^`]+)`|\[(?P<link>[^\]]+)\]\([^)]*\))"
)
REF_SPLIT_RE = re.compile(r":| - | – | — |\(")
SEPARATOR_CELL_RE = re.compile(r"^:?-+:?$")
THEMATIC_BREAK_RE = re.compile(r"^\s*([-*_])\s*(?:\1\s*){2,}$")

SECTION_NAMES = {
    "identity": "identity",
    "expertise": "expertise",
    "expertise areas": "expertise",
    "patterns": "patterns",
    "anti-patterns": "anti_patterns",
    "anti patterns": "anti_patterns",
    "antipatterns": "anti_patterns",
    "sharp edges": "sharp_edges",
    "gotchas": "sharp_edges",
    "collaboration": "collaboration",
    "validations": "validations",
    "validation rules": "validations",
}

PATTERN_FIELDS = {"when to use": "when_to_use", "use when": "when_to_use"}
ANTI_PATTERN_FIELDS = {
    "instead": "instead",
    "do instead": "instead",
    "instead do": "instead",
    "better": "instead",
}
SHARP_EDGE_FIELDS = {
    "situation": "situation",
    "why it happens": "why_it_happens",
    "why": "why_it_happens",
    "solution": "solution",
    "fix": "solution",
    "symptoms": "symptoms",
    "detection": "detection",
    "detection pattern": "detection",
}
VALIDATION_FIELDS = {
    "id": "id",
    "pattern": "pattern",
    "regex": "pattern",
    "message": "message",
    "fix": "fix_action",
    "fix action": "fix_action",
}


@dataclass(frozen=True)
class ParsedSkill:
    """A record plus the non-fatal issues found while parsing it."""

    record: SkillRecord
    issues: tuple[ParseIssue, ...] = ()


class _IssueLog:
    def __init__(self, source: str):
        self.source = source
        self.items: list[ParseIssue] = []

    def error(self, section: str, message: str, item: str | None = None) -> None:
        self.items.append(
            ParseIssue(source=self.source, section=section, message=message, item=item)
        )

    def warning(self, section: str, message: str, item: str | None = None) -> None:
        self.items.append(
            ParseIssue(
                source=self.source,
                section=section,
                message=message,
                level="warning",
                item=item,
            )
        )


# ============================================================================
# Line-level helpers
# ============================================================================


def _iter_lines(lines: Iterable[str]) -> Iterator[tuple[str, bool]]:
    """Yield (line, in_code) pairs. Fence delimiter lines count as code."""
    fence: str | None = None
    for line in lines:
        if fence is None:
            match = FENCE_RE.match(line)
            if match:
                fence = match.group(1)
                yield line, True
            else:
                yield line, False
        else:
            stripped = line.strip()
            if stripped.startswith(fence) and set(stripped) == {fence[0]}:
                fence = None
            yield line, True


def _split_sections(
    lines: Iterable[str], level: int
) -> tuple[list[str], list[tuple[str, list[str]]]]:
    """Split lines at headings of exactly ``level``.

    Returns the lines before the first such heading and a list of
    (heading text, body lines) pairs.
    """
    preamble: list[str] = []
    sections: list[tuple[str, list[str]]] = []
    current: list[str] | None = None

    for line, in_code in _iter_lines(lines):
        heading = None if in_code else HEADING_RE.match(line)
        if heading and len(heading.group(1)) == level:
            current = []
            sections.append((heading.group(2).strip(), current))
        elif current is None:
            preamble.append(line)
        else:
            current.append(line)

    return preamble, sections


def _join(lines: list[str]) -> str:
    """Join body lines, dropping ``---`` style rules outside code blocks."""
    kept = [
        line
        for line, in_code in _iter_lines(lines)
        if in_code or not THEMATIC_BREAK_RE.match(line)
    ]
    return "\n".join(kept).strip()


def _label_key(label: str) -> str:
    return re.sub(r"\s+", " ", label.strip().lower())


def _section_key(heading: str) -> str:
    text = re.sub(r"\(.*?\)", "", heading)
    return _label_key(text.replace("_", " "))


def _split_fields(
    lines: list[str], aliases: dict[str, str]
) -> tuple[str, dict[str, str]]:
    """Split ``**Label:** text`` blocks.

    Returns the text before the first known label and a mapping of field
    name to text. Unknown labels stay part of the surrounding text.
    """
    lead: list[str] = []
    fields: dict[str, list[str]] = {}
    current = lead

    for line, in_code in _iter_lines(lines):
        match = None if in_code else LABEL_RE.match(line.strip())
        key = aliases.get(_label_key(match.group("label"))) if match else None
        if match and key is not None:
            current = fields.setdefault(key, [])
            if match.group("rest"):
                current.append(match.group("rest"))
        else:
            current.append(line)

    return _join(lead), {key: _join(value) for key, value in fields.items()}


def _parse_list(text: str) -> tuple[str, ...]:
    """Parse a bullet list. Text without bullets is a single item.

    Indented or directly following lines continue the previous item. The list
    ends at a rule or at an unindented paragraph after a blank line.
    """
    lines = text.splitlines()
    items: list[str] = []
    saw_bullet = False
    after_blank = False
    for line in lines:
        if not line.strip():
            after_blank = True
            continue
        if THEMATIC_BREAK_RE.match(line):
            if saw_bullet:
                break
            continue
        match = BULLET_RE.match(line)
        if match:
            saw_bullet = True
            items.append(match.group("text").strip())
        elif saw_bullet:
            if after_blank and not line[:1].isspace():
                break
            items[-1] = f"{items[-1]} {line.strip()}"
        after_blank = False
    if not saw_bullet:
        items = [
            " ".join(
                line.strip()
                for line in lines
                if line.strip() and not THEMATIC_BREAK_RE.match(line)
            )
        ]

    unique: list[str] = []
    for item in items:
        if item and item not in unique:
            unique.append(item)
    return tuple(unique)


def _skill_ref(text: str) -> str:
    """Extract a skill name from ``**name**: why``, `` `name` ``, or plain text."""
    text = text.strip()
    match = REF_RE.match(text)
    if match:
        raw = match.group("bold") or match.group("code") or match.group("link")
    else:
        raw = REF_SPLIT_RE.split(text, maxsplit=1)[0]
    return slugify(raw)


def _parse_refs(text: str) -> tuple[str, ...]:
    refs: list[str] = []
    for line in text.splitlines():
        if not line.strip() or line.strip().endswith(":"):
            continue
        match = BULLET_RE.match(line)
        candidates = [match.group("text")] if match else line.split(",")
        for candidate in candidates:
            ref = _skill_ref(candidate)
            if ref and ref not in refs:
                refs.append(ref)
    return tuple(refs)


# ============================================================================
# Hand-off table
# ============================================================================


def _split_row(line: str) -> list[str]:
    """Split a table row on unescaped pipes outside code spans."""
    text = line.strip()
    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|") and not text.endswith("\\|"):
        text = text[:-1]

    cells: list[str] = []
    buf: list[str] = []
    in_code = False
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and text[i + 1 : i + 2] == "|":
            buf.append("|")
            i += 2
            continue
        if ch == "`":
            in_code = not in_code
        elif ch == "|" and not in_code:
            cells.append("".join(buf).strip())
            buf = []
            i += 1
            continue
        buf.append(ch)
        i += 1
    cells.append("".join(buf).strip())
    return cells


def _is_separator(cells: list[str]) -> bool:
    return all(SEPARATOR_CELL_RE.match(cell.replace(" ", "")) for cell in cells)


def _column_indices(header: list[str], issues: _IssueLog) -> dict[str, int]:
    columns: dict[str, int] = {}
    for index, cell in enumerate(header):
        key = _label_key(cell.strip("*` "))
        if key.startswith("trigger"):
            columns.setdefault("trigger", index)
        elif "delegate" in key:
            columns.setdefault("delegate", index)
        elif "context" in key:
            columns.setdefault("context", index)

    if len(columns) != 3:
        issues.warning(
            "Collaboration",
            "unrecognised hand-off table header, assuming Trigger | Delegate To | Context",
        )
        return {"trigger": 0, "delegate": 1, "context": 2}
    return columns


def _parse_handoff_table(lines: list[str], issues: _IssueLog) -> list[HandoffRule]:
    rows = [
        _split_row(line)
        for line, in_code in _iter_lines(lines)
        if not in_code and line.strip().startswith("|")
    ]
    if not rows:
        return []

    header, *body = rows
    columns = _column_indices(header, issues)
    width = len(header)
    rules: list[HandoffRule] = []

    body = [cells for cells in body if not _is_separator(cells)]
    for number, cells in enumerate(body, start=1):
        if len(cells) > width:
            # Unescaped pipes in the trigger alternation split it across cells
            if columns["trigger"] != 0:
                issues.warning(
                    "Collaboration", f"hand-off row {number} has too many cells, skipped"
                )
                continue
            extra = len(cells) - width
            cells = ["|".join(cells[: extra + 1])] + cells[extra + 1 :]
        if len(cells) < 3 or max(columns.values()) >= len(cells):
            issues.warning(
                "Collaboration",
                f"hand-off row {number} has {len(cells)} cell(s), expected 3, skipped",
            )
            continue

        trigger = cells[columns["trigger"]].replace("`", "").strip()
        delegate = _skill_ref(cells[columns["delegate"]])
        if not split_keywords(trigger):
            issues.warning(
                "Collaboration", f"hand-off row {number} has no trigger keywords, skipped"
            )
            continue
        if not delegate:
            issues.warning(
                "Collaboration", f"hand-off row {number} has no delegate, skipped"
            )
            continue

        rules.append(
            HandoffRule(
                trigger_pattern=trigger,
                delegate_to=delegate,
                context=cells[columns["context"]],
            )
        )
    return rules


# ============================================================================
# Sections
# ============================================================================


def _parse_patterns(lines: list[str], issues: _IssueLog) -> tuple[Pattern, ...]:
    _, items = _split_sections(lines, 3)
    patterns = []
    for heading, body in items:
        if not heading:
            issues.warning("Patterns", "pattern without a name skipped")
            continue
        description, fields = _split_fields(body, PATTERN_FIELDS)
        patterns.append(
            Pattern(
                name=heading,
                description=description,
                when_to_use=fields.get("when_to_use", ""),
            )
        )
    return tuple(patterns)


def _parse_anti_patterns(
    lines: list[str], issues: _IssueLog
) -> tuple[AntiPattern, ...]:
    _, items = _split_sections(lines, 3)
    anti_patterns = []
    for heading, body in items:
        if not heading:
            issues.warning("Anti-Patterns", "anti-pattern without a name skipped")
            continue
        description, fields = _split_fields(body, ANTI_PATTERN_FIELDS)
        anti_patterns.append(
            AntiPattern(
                name=heading,
                description=description,
                instead=fields.get("instead", ""),
            )
        )
    return tuple(anti_patterns)


def _parse_sharp_edges(lines: list[str], issues: _IssueLog) -> tuple[SharpEdge, ...]:
    _, items = _split_sections(lines, 3)
    edges = []
    for heading, body in items:
        match = SEVERITY_RE.match(heading)
        if not match:
            issues.error("Sharp Edges", "missing [SEVERITY] prefix", item=heading)
            continue

        title = match.group("title").strip()
        try:
            severity = Severity.parse(match.group("severity"))
        except ValueError as e:
            issues.error("Sharp Edges", str(e), item=title or heading)
            continue
        if not title:
            issues.error("Sharp Edges", "missing title", item=heading)
            continue

        _, fields = _split_fields(body, SHARP_EDGE_FIELDS)
        missing = [
            label
            for key, label in (("situation", "Situation"), ("solution", "Solution"))
            if not fields.get(key)
        ]
        if missing:
            issues.warning("Sharp Edges", f"missing {', '.join(missing)}", item=title)

        detection = fields.get("detection", "").strip("`").strip() or None
        if detection is not None:
            try:
                re.compile(detection)
            except re.error as e:
                issues.warning(
                    "Sharp Edges", f"invalid detection pattern dropped: {e}", item=title
                )
                detection = None

        edges.append(
            SharpEdge(
                severity=severity,
                title=title,
                situation=fields.get("situation", ""),
                why_it_happens=fields.get("why_it_happens", ""),
                solution=fields.get("solution", ""),
                symptoms=_parse_list(fields.get("symptoms", "")),
                detection=detection,
            )
        )
    return tuple(edges)


def _parse_validations(
    lines: list[str], issues: _IssueLog
) -> tuple[ValidationRule, ...]:
    _, items = _split_sections(lines, 3)
    rules: list[ValidationRule] = []
    for heading, body in items:
        match = SEVERITY_RE.match(heading)
        if not match:
            issues.error("Validations", "missing [SEVERITY] prefix", item=heading)
            continue

        name = match.group("title").strip()
        try:
            severity = Severity.parse(match.group("severity"))
        except ValueError as e:
            issues.error("Validations", str(e), item=name or heading)
            continue
        if not name:
            issues.error("Validations", "missing name", item=heading)
            continue

        _, fields = _split_fields(body, VALIDATION_FIELDS)
        pattern = fields.get("pattern", "").strip("`").strip()
        if not pattern:
            issues.error("Validations", "missing Pattern", item=name)
            continue
        try:
            re.compile(pattern)
        except re.error as e:
            issues.error("Validations", f"invalid pattern: {e}", item=name)
            continue

        rule_id = slugify(fields.get("id") or name)
        if any(rule.id == rule_id for rule in rules):
            issues.warning(
                "Validations", f"duplicate rule id '{rule_id}' ignored", item=name
            )
            continue
        message = fields.get("message", "")
        if not message:
            issues.warning("Validations", "missing Message", item=name)

        rules.append(
            ValidationRule(
                id=rule_id,
                name=name,
                severity=severity,
                pattern=pattern,
                message=message or name,
                fix_action=fields.get("fix_action", ""),
            )
        )
    return tuple(rules)


def _parse_collaboration(
    lines: list[str], issues: _IssueLog
) -> tuple[list[HandoffRule], tuple[str, ...], tuple[str, ...]]:
    preamble, subsections = _split_sections(lines, 3)
    rules = _parse_handoff_table(preamble, issues)
    receives_from: tuple[str, ...] = ()
    works_well_with: tuple[str, ...] = ()

    for heading, body in subsections:
        key = _section_key(heading)
        if key.startswith(("when to hand off", "hand off", "hand-off", "handoff")):
            rules.extend(_parse_handoff_table(body, issues))
        elif key.startswith(("receives work from", "receives from")):
            receives_from = _parse_refs(_join(body))
        elif key.startswith("works well with"):
            works_well_with = _parse_refs(_join(body))
        else:
            logger.debug(f"Ignoring collaboration subsection '{heading}'")

    return rules, receives_from, works_well_with


def _parse_metadata(lines: list[str]) -> dict[str, str]:
    """Collect ``**Key:** value | **Key:** value`` pairs."""
    meta: dict[str, str] = {}
    for line in lines:
        if line.lstrip().startswith(">"):
            continue
        matches = list(META_RE.finditer(line))
        for index, match in enumerate(matches):
            end = matches[index + 1].start() if index + 1 < len(matches) else len(line)
            value = line[match.end() : end].strip().rstrip("|").strip()
            meta[_label_key(match.group("key"))] = value
    return meta


def _parse_summary(lines: list[str]) -> str:
    quoted = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(">"):
            text = stripped[1:]
            quoted.append(text[1:] if text.startswith(" ") else text)
    return _join(quoted)


def _as_list(value: Any, separator: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return str(value).split(separator)


def _frontmatter_list(
    frontmatter: dict[str, Any], key: str, issues: _IssueLog
) -> str | list[str] | None:
    """A frontmatter value that must be a string or a list of scalars.

    Anything else is reported and treated as absent.
    """
    value = frontmatter.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list) and all(
        isinstance(item, (str, int, float)) for item in value
    ):
        return [str(item) for item in value]
    issues.error(
        "Frontmatter",
        f"'{key}' must be a string or a list, got {type(value).__name__}",
        item=key,
    )
    return None


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    result: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in result:
            result.append(value)
    return tuple(result)


# ============================================================================
# Public API
# ============================================================================


def parse_skill(
    content: str,
    source: str | Path | None = None,
    name: str | None = None,
    category: str | None = None,
) -> ParsedSkill:
    """
    Parse one skill document.

    Args:
        content: Raw markdown text
        source: Path the text was read from (used for naming and issues)
        name: Skill name to use when the frontmatter does not set one
        category: Category to use when the document does not declare one

    Returns:
        ParsedSkill with the record and any non-fatal issues

    Raises:
        SkillParseError: If the document has no H1 title
    """
    source_path = Path(source) if source is not None else None
    issues = _IssueLog(str(source) if source is not None else (name or "<string>"))
    content = content.replace("\r\n", "\n")

    try:
        frontmatter, body = parse_frontmatter(content)
    except (yaml.YAMLError, ValueError) as e:
        issues.error("Frontmatter", f"invalid frontmatter: {e}")
        frontmatter = {}
        _, body = split_frontmatter(content)

    preamble, h1_sections = _split_sections(body.splitlines(), 1)
    if not h1_sections or not h1_sections[0][0]:
        issues.error("Title", "missing H1 title")
        raise SkillParseError(issues.source, issues.items)

    title, rest = h1_sections[0]
    for heading, lines in h1_sections[1:]:
        rest = rest + [f"# {heading}"] + lines

    intro, sections = _split_sections(rest, 2)
    meta = _parse_metadata(intro)

    record_name = slugify(str(frontmatter.get("id") or frontmatter.get("name") or ""))
    if not record_name:
        record_name = name or (source_path.stem if source_path else "") or slugify(title)

    found: dict[str, list[str]] = {}
    for heading, lines in sections:
        key = SECTION_NAMES.get(_section_key(heading))
        if key is None:
            logger.debug(f"Ignoring section '{heading}' in {issues.source}")
            continue
        if key in found:
            issues.warning(heading, "duplicate section ignored")
            continue
        found[key] = lines

    rules, receives_from, works_well_with = _parse_collaboration(
        found.get("collaboration", []), issues
    )

    triggers = _frontmatter_list(frontmatter, "triggers", issues)
    if triggers is None:
        triggers = meta.get("triggers", "")
    if isinstance(triggers, list):
        triggers = "|".join(triggers)
    tags = _frontmatter_list(frontmatter, "tags", issues)
    if tags is None:
        tags = meta.get("tags")

    record = SkillRecord(
        name=record_name,
        title=str(frontmatter.get("title") or title),
        summary=str(frontmatter.get("description") or _parse_summary(intro)),
        category=str(frontmatter.get("category") or meta.get("category") or category or ""),
        version=str(frontmatter.get("version") or meta.get("version") or ""),
        tags=_unique(_as_list(tags, ",")),
        triggers=split_keywords(triggers),
        identity=_join(found.get("identity", [])),
        expertise=_parse_list(_join(found.get("expertise", []))),
        patterns=_parse_patterns(found.get("patterns", []), issues),
        anti_patterns=_parse_anti_patterns(found.get("anti_patterns", []), issues),
        sharp_edges=_parse_sharp_edges(found.get("sharp_edges", []), issues),
        validations=_parse_validations(found.get("validations", []), issues),
        handoff_rules=tuple(rules),
        receives_from=receives_from,
        works_well_with=works_well_with,
        source=str(source_path) if source_path else None,
    )
    return ParsedSkill(record=record, issues=tuple(issues.items))


def _render_field(label: str, text: str) -> list[str]:
    if not text:
        return []
    if "\n" in text or FENCE_RE.match(text):
        return [f"**{label}:**", text, ""]
    return [f"**{label}:** {text}", ""]


def _escape_cell(text: str) -> str:
    return text.replace("\n", " ").replace("|", "\\|")


def render_skill(record: SkillRecord) -> str:
    """Serialize a record back to the markdown skill conventions."""
    out = [f"# {record.title}", ""]

    if record.summary:
        out += [f"> {line}".rstrip() for line in record.summary.splitlines()]
        out.append("")

    meta = []
    if record.category:
        meta.append(f"**Category:** {record.category}")
    if record.version:
        meta.append(f"**Version:** {record.version}")
    if record.tags:
        meta.append(f"**Tags:** {', '.join(record.tags)}")
    if record.triggers:
        meta.append(f"**Triggers:** {'|'.join(record.triggers)}")
    if meta:
        out += [" | ".join(meta), ""]

    if record.identity:
        out += ["## Identity", "", record.identity, ""]

    if record.expertise:
        out += ["## Expertise Areas", ""]
        out += [f"- {item}" for item in record.expertise]
        out.append("")

    if record.patterns:
        out += ["## Patterns", ""]
        for pattern in record.patterns:
            out += [f"### {pattern.name}", ""]
            if pattern.description:
                out += [pattern.description, ""]
            out += _render_field("When to use", pattern.when_to_use)

    if record.anti_patterns:
        out += ["## Anti-Patterns", ""]
        for anti in record.anti_patterns:
            out += [f"### {anti.name}", ""]
            if anti.description:
                out += [anti.description, ""]
            out += _render_field("Instead", anti.instead)

    if record.sharp_edges:
        out += ["## Sharp Edges (Gotchas)", ""]
        for edge in record.sharp_edges:
            out += [f"### [{edge.severity.name}] {edge.title}", ""]
            out += _render_field("Situation", edge.situation)
            out += _render_field("Why it happens", edge.why_it_happens)
            out += _render_field("Solution", edge.solution)
            if edge.detection:
                out += [f"**Detection:** `{edge.detection}`", ""]
            if edge.symptoms:
                out += ["**Symptoms:**"]
                out += [f"- {symptom}" for symptom in edge.symptoms]
                out.append("")

    if record.validations:
        out += ["## Validations", ""]
        for rule in record.validations:
            out += [f"### [{rule.severity.name}] {rule.name}", ""]
            if rule.id != slugify(rule.name):
                out += [f"**Id:** {rule.id}", ""]
            out += [f"**Pattern:** `{rule.pattern}`", ""]
            out += _render_field("Message", rule.message)
            out += _render_field("Fix", rule.fix_action)

    if record.handoff_rules or record.receives_from or record.works_well_with:
        out += ["## Collaboration", ""]
        if record.handoff_rules:
            out += [
                "### When to Hand Off",
                "",
                "| Trigger | Delegate To | Context |",
                "|---------|-------------|---------|",
            ]
            out += [
                f"| {_escape_cell(rule.trigger_pattern)} | {rule.delegate_to} "
                f"| {_escape_cell(rule.context)} |"
                for rule in record.handoff_rules
            ]
            out.append("")
        if record.receives_from:
            out += ["### Receives Work From", ""]
            out += [f"- {name}" for name in record.receives_from]
            out.append("")
        if record.works_well_with:
            out += ["### Works Well With", ""]
            out += [f"- {name}" for name in record.works_well_with]
            out.append("")

    return "\n".join(out).rstrip() + "\n"
