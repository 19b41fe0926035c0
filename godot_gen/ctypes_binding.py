"""Translate gdextension_interface.h into a Python ctypes module.

The header is parsed with libclang. Top-level TYPEDEF_DECL, STRUCT_DECL,
UNION_DECL and ENUM_DECL cursors become ctypes declarations, and integer
object-like macros become constants. Other declarations are counted as
skipped. Types libclang resolves to something ctypes cannot express are
emitted as `ctypes.c_void_p`.

The header is parsed with `-nostdinc` against the minimal libc headers in
`res/include`, so the result does not depend on the host's system headers.
"""

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from clang.cindex import (
    Cursor,
    CursorKind,
    Diagnostic,
    Index,
    TranslationUnit,
    Type,
    TypeKind,
)


# ===--- Constants ---=== #

STUB_INCLUDE_DIR = Path(__file__).resolve().parent / "res" / "include"

CLANG_ARGS = ["-x", "c", "-std=c11", "-nostdinc", f"-I{STUB_INCLUDE_DIR}"]

# Typedef names mapped straight to a ctypes type instead of their
# canonical type, so fixed-width names survive translation.
C_TO_CTYPES = {
    "bool": "ctypes.c_bool",
    "size_t": "ctypes.c_size_t",
    "ptrdiff_t": "ctypes.c_ssize_t",
    "int8_t": "ctypes.c_int8",
    "int16_t": "ctypes.c_int16",
    "int32_t": "ctypes.c_int32",
    "int64_t": "ctypes.c_int64",
    "uint8_t": "ctypes.c_uint8",
    "uint16_t": "ctypes.c_uint16",
    "uint32_t": "ctypes.c_uint32",
    "uint64_t": "ctypes.c_uint64",
    "uint_least16_t": "ctypes.c_uint16",
    "uint_least32_t": "ctypes.c_uint32",
    "char16_t": "ctypes.c_uint16",
    "char32_t": "ctypes.c_uint32",
    "wchar_t": "ctypes.c_wchar",
}

BUILTIN_KINDS = {
    TypeKind.VOID: "None",
    TypeKind.BOOL: "ctypes.c_bool",
    TypeKind.CHAR_S: "ctypes.c_char",
    TypeKind.CHAR_U: "ctypes.c_char",
    TypeKind.SCHAR: "ctypes.c_byte",
    TypeKind.UCHAR: "ctypes.c_ubyte",
    TypeKind.SHORT: "ctypes.c_short",
    TypeKind.USHORT: "ctypes.c_ushort",
    TypeKind.INT: "ctypes.c_int",
    TypeKind.UINT: "ctypes.c_uint",
    TypeKind.LONG: "ctypes.c_long",
    TypeKind.ULONG: "ctypes.c_ulong",
    TypeKind.LONGLONG: "ctypes.c_longlong",
    TypeKind.ULONGLONG: "ctypes.c_ulonglong",
    TypeKind.FLOAT: "ctypes.c_float",
    TypeKind.DOUBLE: "ctypes.c_double",
    TypeKind.LONGDOUBLE: "ctypes.c_longdouble",
    TypeKind.WCHAR: "ctypes.c_wchar",
    TypeKind.CHAR16: "ctypes.c_uint16",
    TypeKind.CHAR32: "ctypes.c_uint32",
}

FUNCTION_KINDS = (TypeKind.FUNCTIONPROTO, TypeKind.FUNCTIONNOPROTO)
RECORD_KINDS = (CursorKind.STRUCT_DECL, CursorKind.UNION_DECL)

# Preprocessor bookkeeping cursors; neither translated nor skipped.
IGNORED_KINDS = (
    CursorKind.MACRO_INSTANTIATION,
    CursorKind.INCLUSION_DIRECTIVE,
)


# ===--- Data classes ---=== #


@dataclass(frozen=True)
class BindingResult:
    path: Path
    line_count: int
    constants: int
    aliases: int
    enums: int
    structs: int
    functions: int
    skipped: int


@dataclass(frozen=True)
class RecordDef:
    name: str
    cursor: Cursor
    is_union: bool


# ===--- Parsing ---=== #


def parse_header(source: str, header_name: str) -> TranslationUnit:
    """Parse C source with libclang, failing on any error diagnostic.

    Raises:
        ValueError: libclang reported errors; the first few are listed.
    """
    index = Index.create()
    tu = index.parse(
        header_name,
        args=CLANG_ARGS,
        unsaved_files=[(header_name, source)],
        options=TranslationUnit.PARSE_DETAILED_PROCESSING_RECORD,
    )
    errors = [
        f"{diag.location.line}:{diag.location.column}: {diag.spelling}"
        for diag in tu.diagnostics
        if diag.severity >= Diagnostic.Error
    ]
    if errors:
        raise ValueError(f"cannot parse {header_name}: " + "; ".join(errors[:5]))
    return tu


def _desugar(t: Type) -> Type:
    while t.kind == TypeKind.ELABORATED:
        t = t.get_named_type()
    return t


def _is_anonymous(cursor: Cursor) -> bool:
    # libclang < 16 spells anonymous records as "", newer ones as
    # "struct (unnamed at file:line:col)".
    name = cursor.spelling
    return not name or "(" in name or "unnamed" in name


def _macro_value(cursor: Cursor) -> int | None:
    tokens = [token.spelling for token in cursor.get_tokens()]
    if len(tokens) != 2:
        return None
    try:
        return int(tokens[1].rstrip("uUlL"), 0)
    except ValueError:
        return None


# ===--- Translator ---=== #


class CtypesTranslator:
    """Walks the cursors of one translation unit and emits ctypes source.

    Record classes are declared first and get their `_fields_` at the end,
    in by-value dependency order, so pointers between records always
    resolve to the record class.
    """

    def __init__(self, tu: TranslationUnit):
        self.tu = tu
        self.constants: list[str] = []
        self.lines: list[str] = []
        self.known: set[str] = set()
        self.records: list[RecordDef] = []
        self.record_names: dict[int, str] = {}
        self._enums_done: set[int] = set()
        self.counts = {
            "constants": 0,
            "aliases": 0,
            "enums": 0,
            "structs": 0,
            "functions": 0,
            "skipped": 0,
        }

    def own_cursors(self) -> list[Cursor]:
        main_file = self.tu.spelling
        return [
            cursor
            for cursor in self.tu.cursor.get_children()
            if cursor.location.file is not None
            and cursor.location.file.name == main_file
        ]

    # ---- type resolution ----

    def _record_name(self, canonical: Type) -> str | None:
        definition = canonical.get_declaration().get_definition()
        if definition is None:
            return None
        return self.record_names.get(definition.hash)

    def ctype(self, t: Type) -> str:
        t = _desugar(t)
        kind = t.kind

        if kind == TypeKind.TYPEDEF:
            name = t.get_declaration().spelling
            if name in C_TO_CTYPES:
                return C_TO_CTYPES[name]
            if name in self.known:
                return name
            return self.ctype(t.get_canonical())

        if kind == TypeKind.POINTER:
            pointee = _desugar(t.get_pointee())
            canonical = pointee.get_canonical()
            if canonical.kind == TypeKind.VOID:
                return "ctypes.c_void_p"
            if canonical.kind in (TypeKind.CHAR_S, TypeKind.CHAR_U, TypeKind.SCHAR):
                return "ctypes.c_char_p"
            if canonical.kind in FUNCTION_KINDS:
                return "ctypes.c_void_p"
            if canonical.kind == TypeKind.RECORD and self._record_name(canonical) is None:
                # opaque handle
                return "ctypes.c_void_p"
            inner = self.ctype(pointee)
            if inner == "None":
                return "ctypes.c_void_p"
            return f"ctypes.POINTER({inner})"

        if kind == TypeKind.CONSTANTARRAY:
            element = self.ctype(t.get_array_element_type())
            return f"{element} * {t.get_array_size()}"

        if kind == TypeKind.INCOMPLETEARRAY:
            return f"{self.ctype(t.get_array_element_type())} * 0"

        if kind == TypeKind.RECORD:
            name = self._record_name(t)
            if name is not None:
                return name

        if kind == TypeKind.ENUM:
            return "ctypes.c_int"

        if kind in BUILTIN_KINDS:
            return BUILTIN_KINDS[kind]

        canonical = t.get_canonical()
        if canonical.kind != kind:
            return self.ctype(canonical)
        self.counts["skipped"] += 1
        return "ctypes.c_void_p"

    # ---- declarations ----

    def collect_records(self, cursors: list[Cursor]) -> None:
        """Name every record definition, using the typedef for anonymous ones."""
        for cursor in cursors:
            if cursor.kind in RECORD_KINDS and cursor.is_definition():
                self.records.append(
                    RecordDef("", cursor, cursor.kind == CursorKind.UNION_DECL)
                )
                if not _is_anonymous(cursor):
                    self.record_names[cursor.hash] = cursor.spelling
            elif cursor.kind == CursorKind.TYPEDEF_DECL:
                underlying = cursor.underlying_typedef_type
                canonical = underlying.get_canonical()
                if canonical.kind != TypeKind.RECORD:
                    continue
                if _desugar(underlying).kind == TypeKind.TYPEDEF:
                    continue
                definition = canonical.get_declaration().get_definition()
                if definition is not None and definition.hash not in self.record_names:
                    self.record_names[definition.hash] = cursor.spelling

        named: list[RecordDef] = []
        for record in self.records:
            name = self.record_names.get(record.cursor.hash)
            if name is None:
                self.counts["skipped"] += 1
                continue
            named.append(RecordDef(name, record.cursor, record.is_union))
            self.known.add(name)
        self.records = named
        self.counts["structs"] = len(named)

    def _bind(self, name: str, expr: str) -> bool:
        if name in self.known:
            return False
        self.lines.append(f"{name} = {expr}")
        self.known.add(name)
        return True

    def emit_enum(self, cursor: Cursor) -> None:
        if cursor.hash in self._enums_done:
            return
        self._enums_done.add(cursor.hash)
        for child in cursor.get_children():
            if child.kind == CursorKind.ENUM_CONSTANT_DECL:
                self.lines.append(f"{child.spelling} = {child.enum_value}")
        if not _is_anonymous(cursor):
            self._bind(cursor.spelling, "ctypes.c_int")
        self.lines.append("")
        self.counts["enums"] += 1

    def emit_function_type(self, name: str, proto: Type) -> None:
        result = proto.get_result()
        if result.get_canonical().kind == TypeKind.VOID:
            restype = "None"
        else:
            restype = self.ctype(result)
        argtypes = []
        if proto.kind == TypeKind.FUNCTIONPROTO:
            argtypes = [self.ctype(arg) for arg in proto.argument_types()]
        args = ", ".join([restype, *argtypes])
        if self._bind(name, f"ctypes.CFUNCTYPE({args})"):
            self.counts["functions"] += 1

    def emit_typedef(self, cursor: Cursor) -> None:
        name = cursor.spelling
        if name in C_TO_CTYPES:
            # already mapped natively, e.g. char32_t after the header tweak
            return
        underlying = cursor.underlying_typedef_type
        target = _desugar(underlying)
        canonical = underlying.get_canonical()

        if target.kind == TypeKind.ENUM:
            definition = canonical.get_declaration().get_definition()
            if definition is not None:
                self.emit_enum(definition)
            self._bind(name, "ctypes.c_int")
            return

        if target.kind == TypeKind.RECORD and self._record_name(canonical) == name:
            # the record class already carries this name
            return

        if target.kind == TypeKind.POINTER:
            pointee = target.get_pointee()
            if pointee.kind in FUNCTION_KINDS:
                self.emit_function_type(name, pointee)
                return

        if self._bind(name, self.ctype(underlying)):
            self.counts["aliases"] += 1

    def emit_constant(self, cursor: Cursor) -> None:
        value = _macro_value(cursor)
        if value is None:
            return
        self.constants.append(f"{cursor.spelling} = {value}")
        self.counts["constants"] += 1

    # ---- record layout ----

    def _value_dependencies(self, record: RecordDef) -> set[str]:
        deps = set()
        for field in record.cursor.get_children():
            if field.kind != CursorKind.FIELD_DECL:
                continue
            t = field.type.get_canonical()
            while t.kind == TypeKind.CONSTANTARRAY:
                t = t.get_array_element_type().get_canonical()
            if t.kind == TypeKind.RECORD:
                name = self._record_name(t)
                if name is not None and name != record.name:
                    deps.add(name)
        return deps

    def sorted_records(self) -> list[RecordDef]:
        """Order records so that by-value members are laid out first.

        Declaration order is kept wherever dependencies allow.
        """
        by_name = {record.name: record for record in self.records}
        in_degree = {name: 0 for name in by_name}
        adj = defaultdict(list)
        for record in self.records:
            for dep in self._value_dependencies(record):
                adj[dep].append(record.name)
                in_degree[record.name] += 1

        queue = [name for name in by_name if in_degree[name] == 0]
        result = []
        while queue:
            node = queue.pop(0)
            result.append(node)
            for neighbor in adj[node]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(result) != len(by_name):
            remaining = set(by_name) - set(result)
            raise ValueError(f"dependency cycle between records: {sorted(remaining)}")
        return [by_name[name] for name in result]

    def record_fields(self, record: RecordDef) -> list[str]:
        lines = []
        for field in record.cursor.get_children():
            if field.kind != CursorKind.FIELD_DECL:
                continue
            ctype = self.ctype(field.type)
            if field.is_bitfield():
                lines.append(
                    f'    ("{field.spelling}", {ctype}, {field.get_bitfield_width()}),'
                )
            else:
                lines.append(f'    ("{field.spelling}", {ctype}),')
        if not lines:
            return [f"{record.name}._fields_ = []"]
        return [f"{record.name}._fields_ = [", *lines, "]"]

    # ---- driver ----

    def translate(self) -> list[str]:
        cursors = self.own_cursors()
        self.collect_records(cursors)

        for cursor in cursors:
            kind = cursor.kind
            if kind == CursorKind.MACRO_DEFINITION:
                self.emit_constant(cursor)
            elif kind == CursorKind.TYPEDEF_DECL:
                self.emit_typedef(cursor)
            elif kind == CursorKind.ENUM_DECL:
                if cursor.is_definition():
                    self.emit_enum(cursor)
            elif kind in RECORD_KINDS or kind in IGNORED_KINDS:
                continue
            else:
                self.counts["skipped"] += 1

        out: list[str] = []
        if self.constants:
            out.extend(self.constants)
            out.append("")
        for record in self.records:
            base = "ctypes.Union" if record.is_union else "ctypes.Structure"
            out.extend([f"class {record.name}({base}):", "    pass", "", ""])
        if self.lines:
            out.extend(self.lines)
            out.append("")
        for record in self.sorted_records():
            out.extend(self.record_fields(record))
            out.append("")
        return out


# ===--- Entry point ---=== #


def translate_header(source: str, header_name: str = "gdextension_interface.h") -> tuple[str, dict[str, int]]:
    tu = parse_header(source, header_name)
    translator = CtypesTranslator(tu)
    body = translator.translate()

    declared = sum(
        translator.counts[key]
        for key in ("constants", "aliases", "enums", "structs", "functions")
    )
    if declared == 0:
        raise ValueError(f"no C declarations found in {header_name}")

    lines = [
        f"# Generated by godot-gen from {Path(header_name).name}. Do not edit.",
        "",
        "import ctypes",
        "",
        *body,
    ]
    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines) + "\n", translator.counts


def generate_ctypes_binding(header_path: Path, output_path: Path) -> BindingResult:
    """Read a C header and write the equivalent ctypes module.

    Args:
        header_path: Patched gdextension_interface.h.
        output_path: Destination .py file. Parent directories are created.

    Returns:
        BindingResult with the written path and declaration counts.

    Raises:
        OSError: Header unreadable or output not writable.
        ValueError: Header does not parse or contains no translatable
            declarations.
    """
    header_path = Path(header_path)
    output_path = Path(output_path)
    source = header_path.read_text(encoding="utf-8")
    content, counts = translate_header(source, str(header_path))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    return BindingResult(
        path=output_path,
        line_count=content.count("\n"),
        **counts,
    )
