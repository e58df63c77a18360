"""
Tests for DDL generation.
"""

from decimal import Decimal

import pytest
from tenjin_core.lib import sql
from tenjin_core.lib.schema import (
    BucketOptions,
    CustomType,
    Field,
    Function,
    Index,
    StorageBucket,
    Table,
    Trigger,
    View,
)


def make_table(fields, **kwargs):
    return Table("users", fields=[Field(name, type_, opts) for name, type_, opts in fields], **kwargs)


class TestGenerateField:

    def test_basic_field(self):
        assert sql.generate_field(Field("name", "text")) == "name text"

    def test_not_null_unique(self):
        column = Field("email", "text", {"null": False, "unique": True})
        assert sql.generate_field(column) == "email text NOT NULL UNIQUE"

    def test_default_function_call(self):
        column = Field("created_at", "timestamptz", {"default": "now()"})
        assert sql.generate_field(column) == "created_at timestamptz DEFAULT now()"

    def test_constraint_order(self):
        """PRIMARY KEY, NOT NULL, UNIQUE, DEFAULT, REFERENCES, GENERATED in that order."""
        column = Field("id", "uuid", {
            "primary_key": True,
            "null": False,
            "unique": True,
            "default": "gen_random_uuid()",
            "references": "accounts(id)",
            "on_delete": "set_null",
            "on_update": "set_default",
        })
        assert sql.generate_field(column) == (
            "id uuid PRIMARY KEY NOT NULL UNIQUE DEFAULT gen_random_uuid() "
            "REFERENCES accounts(id) ON DELETE SET NULL ON UPDATE SET DEFAULT"
        )

    @pytest.mark.parametrize("action,keyword", [
        ("cascade", "CASCADE"),
        ("restrict", "RESTRICT"),
        ("set_null", "SET NULL"),
        ("set_default", "SET DEFAULT"),
    ])
    def test_referential_actions(self, action, keyword):
        column = Field("author_id", "uuid", {"references": "users(id)", "on_delete": action})
        assert sql.generate_field(column) == f"author_id uuid REFERENCES users(id) ON DELETE {keyword}"

    def test_generated_column(self):
        column = Field("full_name", "text", {"generated": "first_name || ' ' || last_name"})
        assert sql.generate_field(column) == (
            "full_name text GENERATED ALWAYS AS (first_name || ' ' || last_name) STORED"
        )

    def test_type_is_mapped(self):
        assert sql.generate_field(Field("score", "float")) == "score real"


class TestFormatDefaultValue:

    @pytest.mark.parametrize("value,expected", [
        ("now()", "now()"),
        ("gen_random_uuid()", "gen_random_uuid()"),
        ("active", "'active'"),
        ("it's", "'it''s'"),
        (42, "42"),
        (1.5, "1.5"),
        (Decimal("1.50"), "1.50"),
        (True, "true"),
        (False, "false"),
        ("now() + interval '1 day'", "now() + interval '1 day'"),
        ("CURRENT_DATE", "'CURRENT_DATE'"),
    ])
    def test_formatting(self, value, expected):
        assert sql.format_default_value(value) == expected


class TestGenerateTable:

    def test_basic_table(self):
        table = make_table([
            ("id", "uuid", {"primary_key": True, "default": "gen_random_uuid()"}),
            ("email", "text", {"unique": True, "null": False}),
            ("name", "text", {}),
        ])

        result = sql.generate_table(table)

        assert result == (
            "CREATE TABLE users (\n"
            "  id uuid PRIMARY KEY DEFAULT gen_random_uuid(),\n"
            "  email text NOT NULL UNIQUE,\n"
            "  name text\n"
            ");"
        )

    def test_no_primary_key(self):
        table = make_table([("a", "text", {}), ("b", "integer", {})])
        assert "PRIMARY KEY" not in sql.generate_table(table)

    def test_single_primary_key_stays_inline(self):
        table = make_table([("id", "uuid", {"primary_key": True}), ("name", "text", {})])
        result = sql.generate_table(table)
        assert "id uuid PRIMARY KEY" in result
        assert result.count("PRIMARY KEY") == 1
        assert "PRIMARY KEY (" not in result

    def test_composite_primary_key(self):
        table = make_table([
            ("user_id", "uuid", {"primary_key": True}),
            ("note", "text", {}),
            ("org_id", "uuid", {"primary_key": True, "null": False}),
        ])

        result = sql.generate_table(table)

        assert "  user_id uuid,\n" in result
        assert "  org_id uuid NOT NULL,\n" in result
        assert result.count("PRIMARY KEY") == 1
        assert result.endswith("  PRIMARY KEY (user_id, org_id)\n);")

    def test_table_and_column_comments(self):
        table = make_table(
            [("id", "uuid", {"primary_key": True, "comment": "Row id"})],
            options={"comment": "User's accounts"},
        )

        result = sql.generate_table(table)

        assert "COMMENT ON TABLE users IS 'User''s accounts';" in result
        assert "COMMENT ON COLUMN users.id IS 'Row id';" in result
        assert result.index("COMMENT ON TABLE") < result.index("COMMENT ON COLUMN")


class TestGenerateIndexes:

    def test_single_column(self):
        table = Table("users", indexes=[Index(["email"])])
        assert sql.generate_indexes(table) == "CREATE INDEX users_email_idx ON users (email);"

    def test_unique(self):
        table = Table("users", indexes=[Index(["email"], {"unique": True})])
        assert sql.generate_indexes(table) == "CREATE UNIQUE INDEX users_email_unique ON users (email);"

    def test_composite(self):
        table = Table("posts", indexes=[Index(["author_id", "created_at"])])
        assert sql.generate_indexes(table) == (
            "CREATE INDEX posts_author_id_created_at_idx ON posts (author_id, created_at);"
        )

    def test_method_predicate_name_and_comment(self):
        index = Index(["title"], {
            "name": "posts_title_search",
            "using": "gin",
            "where": "published = true",
            "comment": "Search",
        })

        result = sql.generate_index("posts", index)

        assert result == (
            "CREATE INDEX posts_title_search ON posts USING gin (title) WHERE published = true;\n"
            "COMMENT ON INDEX posts_title_search IS 'Search';"
        )

    def test_multiple_indexes_in_order(self):
        table = Table("users", indexes=[Index(["b"]), Index(["a"])])
        lines = sql.generate_indexes(table).splitlines()
        assert lines == ["CREATE INDEX users_b_idx ON users (b);", "CREATE INDEX users_a_idx ON users (a);"]


class TestGenerateTriggers:

    def test_default_trigger(self):
        trigger = Trigger("touch", ["insert", "update"], "NEW.updated_at = now();")

        result = sql.generate_trigger("posts", trigger)

        assert "CREATE OR REPLACE FUNCTION posts_touch_trigger_fn()\nRETURNS TRIGGER AS $$" in result
        assert "  NEW.updated_at = now();\n  RETURN NEW;\nEND;\n$$ LANGUAGE plpgsql;" in result
        assert "CREATE TRIGGER touch\n  BEFORE INSERT OR UPDATE ON posts\n  FOR EACH ROW\n" in result
        assert result.endswith("EXECUTE FUNCTION posts_touch_trigger_fn();")

    def test_trigger_options(self):
        trigger = Trigger("audit", ["delete"], "PERFORM 1;", {
            "timing": "after",
            "for_each": "statement",
            "when": "pg_trigger_depth() = 0",
        })

        result = sql.generate_trigger("posts", trigger)

        assert "  AFTER DELETE ON posts\n  FOR EACH STATEMENT WHEN (pg_trigger_depth() = 0)\n" in result

    def test_instead_of(self):
        trigger = Trigger("redirect", ["insert"], "PERFORM 1;", {"timing": "instead_of"})
        assert "INSTEAD OF INSERT ON v" in sql.generate_trigger("v", trigger)


class TestGenerateFunction:

    def test_basic_function(self):
        function = Function("slugify", ["text"], "text", "RETURN lower($1);")

        result = sql.generate_function(function)

        assert result == (
            "CREATE OR REPLACE FUNCTION slugify($1 text)\n"
            "RETURNS text AS $$\n"
            "BEGIN\n"
            "  RETURN lower($1);\n"
            "END;\n"
            "$$ LANGUAGE plpgsql;"
        )

    def test_arguments_volatility_and_security(self):
        function = Function("add_numbers", ["integer", "string"], "integer", "RETURN $1;", {
            "volatility": "stable",
            "security": "definer",
        })

        result = sql.generate_function(function)

        assert "add_numbers($1 integer, $2 text)" in result
        assert "RETURNS integer STABLE SECURITY DEFINER AS $$" in result

    def test_sql_language_body_not_wrapped(self):
        function = Function("one", [], "integer", "SELECT 1;", {"language": "sql"})

        result = sql.generate_function(function)

        assert "BEGIN" not in result
        assert "one()\nRETURNS integer AS $$\nSELECT 1;\n$$ LANGUAGE sql;" in result


class TestGenerateView:

    def test_basic_view(self):
        view = View("active_users", "SELECT * FROM users WHERE active = true")
        assert sql.generate_view(view) == "CREATE VIEW active_users AS\nSELECT * FROM users WHERE active = true;"

    def test_materialized_with_comment(self):
        view = View("user_stats", "SELECT COUNT(*) AS total FROM users", {"materialized": True, "comment": "Stats"})

        result = sql.generate_view(view)

        assert result.startswith("CREATE MATERIALIZED VIEW user_stats AS")
        assert "COMMENT ON MATERIALIZED VIEW user_stats IS 'Stats';" in result


class TestGenerateCustomType:

    def test_enum(self):
        custom_type = CustomType("user_role", "enum", values=["admin", "user", "guest"])
        assert sql.generate_custom_type(custom_type) == "CREATE TYPE user_role AS ENUM ('admin', 'user', 'guest');"

    def test_composite(self):
        custom_type = CustomType("address", "composite", fields=[("street", "string"), ("zip", "text")])
        assert sql.generate_custom_type(custom_type) == "CREATE TYPE address AS (street text, zip text);"

    def test_domain(self):
        custom_type = CustomType("email", "domain", base_type="text", constraint="VALUE ~ '^[^@]+@[^@]+$'")
        assert sql.generate_custom_type(custom_type) == (
            "CREATE DOMAIN email AS text CONSTRAINT email_check CHECK (VALUE ~ '^[^@]+@[^@]+$');"
        )

    def test_domain_without_constraint(self):
        custom_type = CustomType("positive", "domain", base_type="integer")
        assert sql.generate_custom_type(custom_type) == "CREATE DOMAIN positive AS integer;"


class TestGenerateStorageBucket:

    def test_full_bucket(self):
        bucket = StorageBucket("avatars", options=BucketOptions(
            public=True,
            file_size_limit="1MB",
            allowed_mime_types=["image/jpeg", "image/png"],
        ))

        result = sql.generate_storage_bucket(bucket)

        assert result.startswith("INSERT INTO storage.buckets (id, name, public, file_size_limit, allowed_mime_types)")
        assert "VALUES ('avatars', 'avatars', true, 1048576, ARRAY['image/jpeg', 'image/png'])" in result
        assert "ON CONFLICT (id) DO UPDATE SET" in result
        assert result.endswith("allowed_mime_types = EXCLUDED.allowed_mime_types;")

    def test_defaults_render_null(self):
        result = sql.generate_storage_bucket(StorageBucket("docs"))
        assert "VALUES ('docs', 'docs', false, NULL, NULL)" in result

    def test_unparsable_size_falls_back_to_null(self):
        bucket = StorageBucket("docs", options=BucketOptions(file_size_limit="huge"))
        assert "VALUES ('docs', 'docs', false, NULL, NULL)" in sql.generate_storage_bucket(bucket)

    def test_empty_mime_list_is_typed(self):
        bucket = StorageBucket("locked", options=BucketOptions(allowed_mime_types=[]))
        assert "VALUES ('locked', 'locked', false, NULL, ARRAY[]::text[])" in sql.generate_storage_bucket(bucket)


def test_enable_rls():
    assert sql.enable_rls("users") == "ALTER TABLE users ENABLE ROW LEVEL SECURITY;"


def test_escape_string():
    assert sql.escape_string("O'Reilly's") == "'O''Reilly''s'"
    assert sql.escape_string("plain") == "'plain'"
