"""Unit tests for reference resolution and diagnostics."""

from __future__ import annotations

import pytest

from refdocs.models import DocMember, DocNode, ReferenceWarning
from refdocs.references import ReferenceIndex, ReferenceResolver, report_warnings

TARGET = DocNode(
    id="Warnings",
    title="Warnings",
    members=(
        DocMember("function", "foo", 0),
        DocMember("macro", "defwarn", 2),
        DocMember("type", "t", 0),
        DocMember("callback", "handle_foo", 0),
    ),
)


def _code(text: str) -> str:
    return f'<code class="inline">{text}</code>'


def _node(content: str = "", **fields: object) -> DocNode:
    defaults: dict[str, object] = {
        "id": "Other",
        "title": "Other",
        "source_path": "lib/other.ex",
        "source_line": 3,
        "content": content,
    }
    defaults.update(fields)
    return DocNode(**defaults)  # type: ignore[arg-type]


@pytest.fixture
def resolver() -> ReferenceResolver:
    return ReferenceResolver(ReferenceIndex.build([TARGET], filtered=["Hidden"]))


@pytest.mark.parametrize(
    ("marker", "href", "label"),
    [
        ("Warnings", "Warnings.html", "Warnings"),
        ("m:Warnings", "Warnings.html", "Warnings"),
        ("Warnings.foo/0", "Warnings.html#foo/0", "Warnings.foo/0"),
        ("Warnings.defwarn/2", "Warnings.html#defwarn/2", "Warnings.defwarn/2"),
        ("t:Warnings.t/0", "Warnings.html#t:t/0", "Warnings.t/0"),
        ("c:Warnings.handle_foo/0", "Warnings.html#c:handle_foo/0", "Warnings.handle_foo/0"),
    ],
)
def test_documented_markers_become_links(
    resolver: ReferenceResolver, marker: str, href: str, label: str
) -> None:
    resolved, warnings = resolver.resolve_node(_node(f"<p>{_code(marker)}</p>"))
    assert resolved.content == f'<p><a href="{href}">{_code(label)}</a></p>'
    assert warnings == []


def test_plain_code_spans_are_resolved(resolver: ReferenceResolver) -> None:
    resolved, _ = resolver.resolve_node(_node("<code>Warnings.foo/0</code>"))
    assert resolved.content == '<a href="Warnings.html#foo/0"><code>Warnings.foo/0</code></a>'


def test_epub_links_use_xhtml_extension() -> None:
    resolver = ReferenceResolver(ReferenceIndex.build([TARGET]), extension=".xhtml")
    resolved, _ = resolver.resolve_node(_node(_code("Warnings.foo/0")))
    assert 'href="Warnings.xhtml#foo/0"' in resolved.content


def test_undefined_function_warns_with_location(resolver: ReferenceResolver) -> None:
    content = f"<p>{_code('Warnings.bar/0')}</p>"
    resolved, warnings = resolver.resolve_node(_node(content))

    assert resolved.content == content, "unresolved markers must stay as code"
    assert warnings == [
        ReferenceWarning(
            reference_text="Warnings.bar/0",
            kind="function",
            node_id="Other",
            context="Other",
            source_path="lib/other.ex",
            source_line=3,
        )
    ]
    assert warnings[0].format() == (
        "reference to function Warnings.bar/0 is undefined\n  lib/other.ex:3: Other"
    )


def test_member_warnings_carry_member_context(resolver: ReferenceResolver) -> None:
    member = DocMember(
        "function", "baz", 1, content=_code("t:Missing.t/0"), source_line=9
    )
    _, warnings = resolver.resolve_node(_node(members=(member,)))

    assert len(warnings) == 1
    warning = warnings[0]
    assert (warning.kind, warning.reference_text) == ("type", "Missing.t/0")
    assert warning.context == "Other.baz/1"
    assert warning.source_line == 9


def test_unknown_bare_module_is_left_alone(resolver: ReferenceResolver) -> None:
    content = _code("Unknown.Module")
    resolved, warnings = resolver.resolve_node(_node(content))
    assert resolved.content == content
    assert warnings == []


def test_unknown_explicit_module_warns(resolver: ReferenceResolver) -> None:
    _, warnings = resolver.resolve_node(_node(_code("m:Unknown.Module")))
    assert [(w.kind, w.reference_text) for w in warnings] == [
        ("module", "Unknown.Module")
    ]


def test_reference_to_filtered_module_is_undefined(resolver: ReferenceResolver) -> None:
    resolved, warnings = resolver.resolve_node(_node(_code("Hidden.foo/0")))
    assert "<a " not in resolved.content
    assert [(w.reason, w.reference_text) for w in warnings] == [
        ("undefined", "Hidden.foo/0")
    ]


def test_typespec_on_filtered_module_warns(resolver: ReferenceResolver) -> None:
    node = _node(specs=("public(integer()) :: Hidden.public(integer())",))
    resolved, warnings = resolver.resolve_node(node)

    assert resolved.specs == node.specs
    assert len(warnings) == 1
    assert warnings[0].reason == "filtered-module"
    assert warnings[0].format().startswith(
        "typespec references filtered module: Hidden.public(integer())"
    )


def test_typespec_remote_types_are_linked(resolver: ReferenceResolver) -> None:
    node = _node(specs=("foo() :: Warnings.t() | String.t()",))
    resolved, warnings = resolver.resolve_node(node)
    assert resolved.specs == (
        'foo() :: <a href="Warnings.html#t:t/0">Warnings.t</a>() | String.t()',
    )
    assert warnings == [], "types of undocumented modules are external, not errors"


def test_typespec_arity_counts_top_level_arguments(resolver: ReferenceResolver) -> None:
    node = _node(specs=("foo() :: Warnings.t(map(a, b), c)",))
    _, warnings = resolver.resolve_node(node)
    assert [w.reference_text for w in warnings] == ["Warnings.t/2"]


def test_existing_links_and_preformatted_blocks_are_skipped(
    resolver: ReferenceResolver,
) -> None:
    content = (
        f'<a href="custom.html">{_code("Warnings")}</a>'
        "<pre><code>Warnings.bar/0</code></pre>"
    )
    resolved, warnings = resolver.resolve_node(_node(content))
    assert resolved.content == content
    assert warnings == []


def test_suppression_matches_node_ids_exactly() -> None:
    index = ReferenceIndex.build([TARGET])
    content = _code("Warnings.bar/0")

    exact = ReferenceResolver(index, skip_warnings_on=["Other"])
    prefix = ReferenceResolver(index, skip_warnings_on=["Oth"])

    assert exact.resolve_node(_node(content))[1] == []
    assert len(prefix.resolve_node(_node(content))[1]) == 1


def test_suppressed_nodes_still_get_links() -> None:
    resolver = ReferenceResolver(
        ReferenceIndex.build([TARGET]), skip_warnings_on=["Other"]
    )
    resolved, _ = resolver.resolve_node(_node(_code("Warnings.foo/0")))
    assert 'href="Warnings.html#foo/0"' in resolved.content


def test_relative_links_between_extras_are_rewritten() -> None:
    license_node = DocNode(id="license", title="LICENSE", kind="extra", source_path="LICENSE")
    guide = DocNode(
        id="intro",
        title="Intro",
        kind="extra",
        source_path="guides/intro.md",
        content=(
            '<a href="../LICENSE">license</a>'
            '<a href="../LICENSE#grant">grant</a>'
            '<a href="https://example.org/LICENSE">upstream</a>'
            '<a href="other.md">other</a>'
        ),
    )
    resolver = ReferenceResolver(ReferenceIndex.build([license_node, guide]))
    resolved, warnings = resolver.resolve_node(guide)

    assert 'href="license.html"' in resolved.content
    assert 'href="license.html#grant"' in resolved.content
    assert 'href="https://example.org/LICENSE"' in resolved.content
    assert 'href="other.md"' in resolved.content
    assert warnings == []


def test_resolution_is_deterministic(resolver: ReferenceResolver) -> None:
    nodes = [
        _node(_code("Warnings.bar/0") + _code("Warnings.baz/1")),
        _node(_code("m:Nope"), id="Third"),
    ]
    first = resolver.resolve_all(nodes)
    second = resolver.resolve_all(nodes)
    assert first == second
    assert [w.reference_text for w in first[1]] == [
        "Warnings.bar/0",
        "Warnings.baz/1",
        "Nope",
    ]


def test_report_writes_each_warning_once(log_messages: list[str]) -> None:
    warning = ReferenceWarning(
        reference_text="Warnings.bar/0",
        kind="function",
        node_id="Other",
        context="Other",
        source_path="lib/other.ex",
        source_line=3,
    )
    assert report_warnings([warning, warning]) == 1
    assert log_messages == [warning.format()]
