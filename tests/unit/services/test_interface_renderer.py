"""Unit tests for the InterfaceRenderer."""

from datetime import UTC, datetime

import pytest

from autoschema.config import AdvancedSettings, OutputSettings, TypeSettings
from autoschema.models.cast import Cast
from autoschema.models.entity import EntityDescriptor, FieldDescriptor, RelationDescriptor
from autoschema.models.enums import Cardinality, FilenameCase
from autoschema.services.interface_renderer import InterfaceRenderer, enum_name

FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)

STATUS_CAST = Cast.parse("enum:active,in-review")


def _user() -> EntityDescriptor:
    return EntityDescriptor(
        identifier="app.models.user.User",
        name="User",
        table="users",
        fields=[
            FieldDescriptor(name="id", source_type="integer", target_type="number", nullable=False),
            FieldDescriptor(
                name="email", source_type="string", target_type="string", nullable=False, comment="Login address"
            ),
            FieldDescriptor(name="bio", source_type="text", target_type="string", nullable=True),
            FieldDescriptor(name="password", source_type="string", target_type="string", nullable=False),
            FieldDescriptor(name="status", source_type="string", target_type="string", nullable=False, cast=STATUS_CAST),
        ],
        relations=[
            RelationDescriptor(
                name="posts",
                kind="one_to_many",
                cardinality=Cardinality.TO_MANY,
                related="app.models.post.Post",
                related_name="Post",
            ),
        ],
        computed=[
            FieldDescriptor(
                name="display_name", source_type="accessor", target_type="string", nullable=False, is_computed=True
            ),
        ],
        hidden=["password"],
        casts={"status": STATUS_CAST},
    )


def _post() -> EntityDescriptor:
    return EntityDescriptor(
        identifier="app.models.post.Post",
        name="BlogPost",
        table="blog_posts",
        fields=[FieldDescriptor(name="id", source_type="integer", target_type="number", nullable=False)],
        relations=[
            RelationDescriptor(
                name="author",
                kind="many_to_one",
                cardinality=Cardinality.TO_ONE,
                related="app.models.user.User",
                related_name="User",
            ),
        ],
    )


def _renderer(
    types: TypeSettings | None = None,
    output: OutputSettings | None = None,
    advanced: AdvancedSettings | None = None,
) -> InterfaceRenderer:
    return InterfaceRenderer(
        types=types or TypeSettings(),
        output=output or OutputSettings(),
        advanced=advanced or AdvancedSettings(),
        clock=lambda: FIXED_NOW,
    )


class TestRenderEntity:
    """Tests for per-entity declaration modules."""

    def test_renders_full_module(self) -> None:
        expected = """\
import type { Post } from './Post';

// This file is generated by autoschema. Do not edit it by hand.

/**
 * app.models.user.User
 * Table: users
 */
export interface User {
  id: number;
  /** Login address */
  email: string;
  bio: string | null;
  password?: string;
  status: UserStatus;
  // Relationship: one_to_many
  posts?: Post[];
  display_name: string;
}

export type UserType = User;

export enum UserStatus {
  active = 'active',
  'in-review' = 'in-review',
}
"""
        assert _renderer().render_entity(_user()) == expected

    def test_optional_marker_mode(self) -> None:
        content = _renderer(types=TypeSettings(nullable_union=False)).render_entity(_user())

        assert "  bio?: string;" in content
        assert "| null" not in content

    def test_hidden_nullable_field_keeps_union(self) -> None:
        user = _user().model_copy(update={"hidden": ["bio"]})

        content = _renderer().render_entity(user)

        assert "  bio?: string | null;" in content

    def test_readonly_properties(self) -> None:
        content = _renderer(types=TypeSettings(readonly_properties=True)).render_entity(_user())

        assert "  readonly id: number;" in content
        assert "  readonly posts?: Post[];" in content

    def test_type_literal_when_interfaces_disabled(self) -> None:
        content = _renderer(types=TypeSettings(generate_interfaces=False)).render_entity(_user())

        assert "export type User = {" in content
        assert "\n};\n" in content
        assert "export interface" not in content

    def test_without_aliases_and_enums(self) -> None:
        content = _renderer(types=TypeSettings(generate_types=False, generate_enums=False)).render_entity(_user())

        assert "UserType" not in content
        assert "export enum" not in content
        assert "  status: string;" in content

    def test_comments_can_be_disabled(self) -> None:
        content = _renderer(advanced=AdvancedSettings(include_database_comments=False)).render_entity(_user())

        assert "Login address" not in content

    def test_timestamp_banner_uses_clock(self) -> None:
        content = _renderer(advanced=AdvancedSettings(add_timestamps=True)).render_entity(_user())

        assert "// Generated at 2024-05-01T12:30:00+00:00" in content

    def test_is_deterministic_without_timestamps(self) -> None:
        renderer = _renderer()

        assert renderer.render_entity(_user()) == renderer.render_entity(_user())

    def test_to_one_relation_and_import_casing(self) -> None:
        renderer = _renderer(output=OutputSettings(filename_case=FilenameCase.KEBAB))

        content = renderer.render_entity(_post())

        assert content.startswith("import type { User } from './user';\n")
        assert "  author?: User;" in content
        assert "  // Relationship: many_to_one" in content


class TestRenderIndex:
    def test_one_statement_per_entity(self) -> None:
        content = _renderer().render_index([_user(), _post()])

        assert content.splitlines()[2:] == [
            "export { type User, type UserType, UserStatus } from './User';",
            "export type { BlogPost, BlogPostType } from './BlogPost';",
        ]

    def test_without_aliases(self) -> None:
        content = _renderer(types=TypeSettings(generate_types=False, generate_enums=False)).render_index([_user()])

        assert "export type { User } from './User';" in content

    def test_module_stem_follows_filename_case(self) -> None:
        renderer = _renderer(output=OutputSettings(filename_case=FilenameCase.SNAKE))

        assert renderer.module_stem("BlogPost") == "blog_post"


@pytest.mark.parametrize(
    ("entity", "field", "expected"),
    [("User", "status", "UserStatus"), ("BlogPost", "review_state", "BlogPostReviewState")],
)
def test_enum_name(entity: str, field: str, expected: str) -> None:
    assert enum_name(entity, field) == expected
