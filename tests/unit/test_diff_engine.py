"""Unit tests for snapshot comparison."""

from dataclasses import replace

import pytest

from design_catalog.diff import DiffEngine, diff_snapshots, format_diff_text
from design_catalog.errors import SnapshotFormatError
from design_catalog.models import ComponentDescriptor, PropInfo, Snapshot
from design_catalog.tokens import ColorToken, TokenTable


def component(name, tokens=(), category="atoms", fingerprint=None, props=(), deps=()):
    return ComponentDescriptor(
        name=name,
        category=category,
        file_path=f"src/{name}.tsx",
        fingerprint=fingerprint or f"fp-{name}-{'-'.join(tokens)}",
        props=tuple(props),
        style_tokens=tuple(tokens),
        dependencies=tuple(deps),
    )


def snapshot(*components, tokens=None, timestamp="t0"):
    return Snapshot(components=components, tokens=tokens or TokenTable(), timestamp=timestamp)


BUTTON_PROPS = (PropInfo("label", "string", True),)


class TestComponentDiff:
    """Tests for component-level changes."""

    def test_button_class_change(self):
        """Test a changed class is reported as added and removed."""
        base = snapshot(component("Button", ["px-4", "py-2", "bg-blue-500"], props=BUTTON_PROPS))
        current = snapshot(component("Button", ["px-4", "py-2", "bg-blue-600"], props=BUTTON_PROPS))

        result = DiffEngine().diff(base, current)

        assert len(result.modified) == 1
        change = result.modified[0]
        assert change.name == "Button"
        assert change.classes_added == ("bg-blue-600",)
        assert change.classes_removed == ("bg-blue-500",)
        assert change.props_changed is False
        assert result.summary.components_modified == 1
        assert result.summary.new_classes == ("bg-blue-600",)

    def test_added_and_removed_components(self):
        """Test components matched by identity are added or removed."""
        base = snapshot(component("Button"), component("Card", category="molecules"))
        current = snapshot(component("Button"), component("Modal", category="organisms"))

        result = DiffEngine().diff(base, current)

        assert [c.name for c in result.added] == ["Modal"]
        assert [c.name for c in result.removed] == ["Card"]
        assert result.unchanged == (("atoms", "Button"),)

    def test_category_change_is_remove_plus_add(self):
        """Test a recategorized component no longer matches its old identity."""
        base = snapshot(component("Button", category="atoms"))
        current = snapshot(component("Button", category="molecules"))

        result = DiffEngine().diff(base, current)

        assert [c.identity for c in result.added] == [("molecules", "Button")]
        assert [c.identity for c in result.removed] == [("atoms", "Button")]

    def test_reordered_classes_are_not_a_change(self):
        """Test class order alone never counts as a change."""
        base = snapshot(component("Button", ["px-4", "py-2"], fingerprint="same"))
        current = snapshot(component("Button", ["py-2", "px-4"], fingerprint="same"))

        result = DiffEngine().diff(base, current)

        assert result.modified == ()
        assert not result.has_changes

    def test_prop_shape_change(self):
        """Test a prop becoming optional is a props change."""
        base = snapshot(component("Button", props=BUTTON_PROPS))
        current = snapshot(
            component("Button", props=(PropInfo("label", "string", False),), fingerprint="new")
        )

        result = DiffEngine().diff(base, current)

        assert result.modified[0].props_changed

    def test_prop_order_and_defaults_do_not_change_shape(self):
        """Test prop shape ignores order and default values."""
        a = PropInfo("a", "string", True)
        b = PropInfo("b", "number", False, "1")
        base = snapshot(component("Button", props=(a, b), fingerprint="x"))
        current = snapshot(
            component("Button", props=(replace(b, default="2"), a), fingerprint="x")
        )

        result = DiffEngine().diff(base, current)

        assert result.modified == ()

    def test_fingerprint_only_change_is_modified(self):
        """Test a source change with no extracted difference still shows as modified."""
        base = snapshot(component("Button", ["px-4"], fingerprint="before"))
        current = snapshot(component("Button", ["px-4"], fingerprint="after"))

        change = DiffEngine().diff(base, current).modified[0]

        assert change.fingerprint_changed
        assert change.classes_added == ()
        assert not change.props_changed

    def test_impact_hints(self):
        """Test components depending on a changed component are listed."""
        base = snapshot(
            component("Button", ["px-4"]),
            component("Card", category="molecules", deps=["Button"]),
        )
        current = snapshot(
            component("Button", ["px-6"]),
            component("Card", category="molecules", deps=["Button"]),
        )

        result = DiffEngine().diff(base, current)

        assert result.impact_hints == {"Button": ("Card",)}

    def test_dependency_delta(self):
        """Test dependency additions are reported on the change."""
        base = snapshot(component("Card", fingerprint="1"))
        current = snapshot(component("Card", fingerprint="2", deps=["Icon"]))

        change = DiffEngine().diff(base, current).modified[0]

        assert change.dependencies_added == ("Icon",)


class TestDiffProperties:
    """Tests for algebraic properties of the diff."""

    @pytest.fixture()
    def pair(self):
        a = snapshot(
            component("Button", ["px-4", "bg-blue-500"]),
            component("Card", ["rounded"], category="molecules"),
            tokens=TokenTable(spacing={"1": "0.25rem"}),
        )
        b = snapshot(
            component("Button", ["px-4", "bg-blue-600"]),
            component("Modal", ["fixed"], category="organisms"),
            tokens=TokenTable(spacing={"1": "0.5rem", "2": "0.5rem"}),
            timestamp="t1",
        )
        return a, b

    def test_self_diff_is_empty(self, pair):
        """Test diff(S, S) has no changes."""
        for snap in pair:
            result = diff_snapshots(snap, snap)

            assert result.added == ()
            assert result.removed == ()
            assert result.modified == ()
            assert result.token_deltas == {}
            assert not result.has_changes

    def test_mirror(self, pair):
        """Test diff(A, B).added == diff(B, A).removed and vice versa."""
        a, b = pair
        forward = diff_snapshots(a, b)
        backward = diff_snapshots(b, a)

        assert forward.added == backward.removed
        assert forward.removed == backward.added
        assert [m.classes_added for m in forward.modified] == [
            m.classes_removed for m in backward.modified
        ]

    def test_input_order_does_not_matter(self, pair):
        """Test the order of components inside a snapshot is irrelevant."""
        a, b = pair
        shuffled = replace(b, components=tuple(reversed(b.components)))

        assert diff_snapshots(a, b).to_dict() == diff_snapshots(a, shuffled).to_dict()

    def test_incompatible_version(self, pair):
        """Test diffing against an incompatible snapshot raises."""
        a, b = pair

        with pytest.raises(SnapshotFormatError):
            diff_snapshots(a, replace(b, format_version="3.0.0"))


class TestTokenDiff:
    """Tests for token deltas."""

    def test_token_categories(self):
        """Test added, removed and modified keys per category."""
        base = snapshot(
            tokens=TokenTable(
                colors={"red": ColorToken.from_value("red", "#f00")},
                spacing={"1": "0.25rem", "2": "0.5rem"},
            )
        )
        current = snapshot(
            tokens=TokenTable(
                colors={"red": ColorToken.from_value("red", "#e00")},
                spacing={"1": "0.25rem", "3": "0.75rem"},
            )
        )

        deltas = DiffEngine().diff(base, current).token_deltas

        assert set(deltas) == {"colors", "spacing"}
        assert deltas["colors"].modified == {"red": {"old": "#f00", "new": "#e00"}}
        assert deltas["spacing"].added == {"3": "0.75rem"}
        assert deltas["spacing"].removed == {"2": "0.5rem"}

    def test_usage_sites_are_not_token_changes(self):
        """Test only color values are compared, never usage sites."""
        tokens = TokenTable(colors={"red": ColorToken.from_value("red", "#f00")})
        base = snapshot(tokens=tokens)
        current = snapshot(tokens=tokens.with_usage_sites({"red": ["Alert"]}))

        assert DiffEngine().diff(base, current).token_deltas == {}


class TestDiffReport:
    """Tests for serialization and text rendering."""

    def test_to_dict_shape(self):
        """Test the diff serializes with camelCase keys."""
        base = snapshot(component("Button", ["px-4"]))
        current = snapshot(component("Button", ["px-6"]), timestamp="t1")

        data = DiffEngine().diff(base, current).to_dict()

        assert data["modified"][0]["classesAdded"] == ["px-6"]
        assert data["summary"]["totalChanges"] == 1
        assert data["baseTimestamp"] == "t0"

    def test_text_report(self):
        """Test the text report lists each change."""
        base = snapshot(component("Button", ["px-4"]), component("Card", category="molecules"))
        current = snapshot(component("Button", ["px-6"]))

        text = format_diff_text(DiffEngine().diff(base, current))

        assert "- molecules/Card" in text
        assert "~ atoms/Button" in text
        assert "classes added: px-6" in text

    def test_text_report_without_changes(self):
        """Test an empty diff says so."""
        snap = snapshot(component("Button"))

        assert "No changes detected" in format_diff_text(diff_snapshots(snap, snap))
