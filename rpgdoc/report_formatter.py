"""Report Formatter

Renders an assembled ProgramModel as the plain-text documentation report:

    MESSAGE LIST | CUSTOM INSTRUCTIONS
    SECTION 1 - PROGRAM OVERVIEW
    ...
    SECTION 10 - DETAILED PROCESSING
    END OF DOCUMENTATION

Tables have fixed column widths; longer values are cut to width with a
trailing ellipsis and never wrapped. Output depends only on the model.
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from .config import ANALYZER_CONFIG

if TYPE_CHECKING:
    from .static_analysis.documentation_generator import ProgramModel


def pad_cell(value, width: int, ellipsis: str = "...") -> str:
    """Left-align value in exactly `width` characters, truncating with ellipsis"""
    text = str(value)
    if len(text) > width:
        return text[:max(width - len(ellipsis), 0)] + ellipsis[:width]
    return text.ljust(width)


class ReportFormatter:
    """Compose the ten report sections from a ProgramModel"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        report = self.config["report"]
        self.banner = report["banner_char"] * report["banner_width"]
        self.ellipsis = report["ellipsis"]
        self.file_columns = report["file_columns"]
        self.mapping_columns = report["mapping_columns"]
        self.rule_width = report["banner_width"] - 1

    def format(self, model: "ProgramModel") -> str:
        out: List[str] = []
        self._leading_block(out, model)
        self._overview(out, model)
        self._file_operations(out, model)
        self._business_rules(out, model)
        self._call_stack(out, model)
        self._dependencies(out, model)
        self._screen_actions(out, model)
        self._validations(out, model)
        self._data_mappings(out, model)
        self._messages(out, model)
        self._detailed_processing(out, model)
        self._heading(out, "END OF DOCUMENTATION", trailing_blank=False)
        return "\n".join(out) + "\n"

    # Building blocks

    def _heading(self, out: List[str], title: str, trailing_blank: bool = True):
        out.extend([self.banner, title, self.banner])
        if trailing_blank:
            out.append("")

    def _table(self, out: List[str], headers: Sequence[str], widths: Sequence[int],
               rows: Sequence[Sequence]):
        def border(left: str, middle: str, right: str) -> str:
            return left + middle.join("─" * (w + 2) for w in widths) + right

        def row(cells: Sequence) -> str:
            padded = [pad_cell(c, w, self.ellipsis) for c, w in zip(cells, widths)]
            return "│ " + " │ ".join(padded) + " │"

        out.append(border("┌", "┬", "┐"))
        out.append(row(headers))
        out.append(border("├", "┼", "┤"))
        out.extend(row(cells) for cells in rows)
        out.append(border("└", "┴", "┘"))
        out.append("")

    # Sections

    def _leading_block(self, out: List[str], model: "ProgramModel"):
        catalog = model.catalog
        if catalog.is_table:
            self._heading(out, "MESSAGE LIST")
            out.extend(f"{message_id}  {text}" for message_id, text in catalog.entries.items())
        elif catalog.guidance:
            self._heading(out, "CUSTOM INSTRUCTIONS")
            out.append(catalog.guidance.rstrip("\n"))
        else:
            self._heading(out, "MESSAGE LIST")
            out.append("No message list provided.")
        out.append("")

    def _overview(self, out: List[str], model: "ProgramModel"):
        metadata = model.metadata
        self._heading(out, "SECTION 1 - PROGRAM OVERVIEW")
        out.append(f"Program Name: {metadata.name}")
        out.append(f"Program Type: {metadata.kind.value}")
        out.append(f"Inputs: {metadata.inputs}")
        out.append(f"Outputs: {metadata.outputs}")
        if metadata.entry_parameters:
            out.append(f"Entry Parameters: {', '.join(metadata.entry_parameters)}")
        out.append("")
        out.append("High-Level Logic:")
        out.append(
            f"{len(model.file_operations)} file(s), {len(model.business_rules)} business "
            f"rule(s), {len(model.call_stack)} call(s) and screen interaction(s), "
            f"{len(model.processing_steps)} processing step(s)."
        )
        out.append("")

    def _file_operations(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 2 - FILE OPERATIONS")
        if not model.file_operations:
            out.extend(["No file operations detected.", ""])
            return
        columns = self.file_columns
        self._table(
            out,
            ["File Name", "Purpose", "Access Type", "Key Fields", "Key Type"],
            [columns["file_name"], columns["purpose"], columns["access_type"],
             columns["key_fields"], columns["key_kind"]],
            [[op.file_name, op.purpose, op.access_type, op.key_fields, op.key_field_kind]
             for op in model.file_operations],
        )

    def _business_rules(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 3 - BUSINESS RULES")
        if not model.business_rules:
            out.extend(["No explicit business rules detected.", ""])
            return
        for rule in model.business_rules:
            out.extend([f"• {rule.name}", f"  {rule.description}", ""])

    def _call_stack(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 4 - CALL STACK")
        if not model.call_stack:
            out.extend(["No program calls detected.", ""])
            return
        for entry in model.call_stack:
            out.append(f"{entry.sequence}. {entry.called_name} - {entry.description}")
            if entry.parameters:
                out.append(f"   Parameters: {', '.join(entry.parameters)}")
        out.append("")

    def _dependencies(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 5 - DEPENDENCIES")
        if not model.dependencies:
            out.extend(["No external dependencies detected.", ""])
            return
        out.extend(f"• {dependency}" for dependency in model.dependencies)
        out.append("")

    def _screen_actions(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 6 - SCREEN ACTIONS")
        if not model.screen_actions:
            out.extend(["No screen actions detected.", ""])
            return
        for action in model.screen_actions:
            out.extend([f"Option: {action.option}",
                        f"Description: {action.description}",
                        f"Action: {action.action}",
                        ""])

    def _validations(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 7 - VALIDATIONS AND MESSAGES")
        if not model.validations:
            out.extend(["No validations detected.", ""])
            return
        for validation in model.validations:
            out.append(f"Validation Type: {validation.validation_type}")
            out.append(f"Description: {validation.description}")
            out.append(f"Message ID: {validation.message_id}")
            if validation.message_text:
                out.append(f"Message Text: {validation.message_text}")
            out.append("")

    def _data_mappings(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 8 - DATA MAPPINGS")
        if not model.data_mappings:
            out.extend(["No data mappings detected.", ""])
            return
        columns = self.mapping_columns
        self._table(
            out,
            ["Source Field", "Target Field", "Target File", "Transform Notes"],
            [columns["source_field"], columns["target_field"], columns["target_file"],
             columns["transform_notes"]],
            [[m.source_field, m.target_field, m.target_file, m.transform_notes]
             for m in model.data_mappings],
        )

    def _messages(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 9 - MESSAGES USED IN PROGRAM")
        if not model.messages:
            out.extend(["No messages detected in program.", ""])
            return
        for message in model.messages:
            out.extend([f"Message ID: {message.id}", f"Message Text: {message.text}", ""])

    def _detailed_processing(self, out: List[str], model: "ProgramModel"):
        self._heading(out, "SECTION 10 - DETAILED PROCESSING")
        for step in model.processing_steps:
            out.append(f"Step {step.step_number}: {step.process_name}")
            out.append("-" * self.rule_width)
            out.append(step.description)
            if step.parameters:
                out.append(f"Parameters: {', '.join(step.parameters)}")
            out.append("")
            out.append("Pseudocode:")
            out.append("```")
            out.extend(step.pseudocode)
            out.append("```")
            if step.truncated:
                out.append(f"(pseudocode truncated after "
                           f"{self.config['pseudocode_max_lines']} lines)")
            out.append("")
