"""
Check generated DDL against the PostgreSQL grammar using pglast.
"""

from datetime import datetime, timezone

import pytest
from tenjin_core.lib.migration import generate_sql_content
from tenjin_core.lib.schema import BucketOptions, SchemaBuilder, StorageBucket
from tenjin_core.lib.sql import generate_storage_bucket

pglast = pytest.importorskip("pglast")


def full_schema():
    builder = SchemaBuilder()
    builder.custom_type("post_status", "enum", values=["draft", "it's published"])
    builder.custom_type("address", "composite", fields=[("street", "string"), ("zip", "text")])
    builder.custom_type("email", "domain", base_type="text", constraint="VALUE ~ '^[^@]+@[^@]+$'")

    with builder.table("users", comment="Application's users") as t:
        t.field("id", "uuid", primary_key=True, default="gen_random_uuid()")
        t.field("email", "email", unique=True, null=False, comment="Login")
        t.field("first_name", "text")
        t.field("last_name", "text")
        t.field("full_name", "text", generated="first_name || ' ' || last_name")
        t.field("active", "boolean", default=True)
        t.enable_rls()
        t.policy("select", "Users can view their own profile", "auth.uid() = id", for_="authenticated")
        t.policy("update", "Users can edit their own profile", "auth.uid() = id", with_check="auth.uid() = id")
        t.policy("all", "Admins manage everything", "is_admin()", for_=["service_role", "postgres"])
        t.index(["email"], unique=True, comment="Lookup by email")
        t.index(["last_name"], using="btree", where="active = true")

    with builder.table("memberships") as t:
        t.field("user_id", "uuid", primary_key=True, references="users(id)", on_delete="cascade")
        t.field("org_id", "uuid", primary_key=True)
        t.field("status", "post_status", default="draft")
        t.field("score", "float", default=0)
        t.enable_rls()
        t.policy("insert", "Members can join", "auth.uid() = user_id")
        t.policy("delete", "Members can leave", "auth.uid() = user_id")
        t.trigger("touch", ["insert", "update"], "NEW.score = NEW.score + 1;", when="pg_trigger_depth() = 0")

    builder.function("member_count", [], "bigint", "RETURN (SELECT count(*) FROM memberships);",
                     volatility="stable", security="definer")
    builder.view("active_users", "SELECT * FROM users WHERE active = true", comment="Active only")
    builder.view("member_stats", "SELECT org_id, count(*) FROM memberships GROUP BY org_id", materialized=True)

    with builder.storage_bucket("avatars") as b:
        b.public(True)
        b.file_size_limit("1MB")
        b.allowed_mime_types(["image/png", "image/jpeg"])
        b.policy("select", "Avatars are public", "true")
        b.policy("insert", "Users upload their own avatar", "auth.uid()::text = (storage.foldername(name))[1]",
                 for_="authenticated")
    return builder.build()


def test_generated_document_parses():
    content = generate_sql_content(full_schema(), created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

    statements = pglast.parse_sql(content)

    # 3 types, users: table + 2 comments, rls, 3x(policy + comment), 2 indexes + 1 comment,
    # memberships: table, rls, 2x(policy + comment), trigger fn + trigger,
    # function, view + comment, materialized view, bucket, 2x(policy + comment)
    assert len(statements) == 3 + (3 + 1 + 6 + 3) + (1 + 1 + 4 + 2) + 1 + 2 + 1 + 1 + 4


def test_bucket_without_allowed_mime_types_parses():
    bucket = StorageBucket("locked", options=BucketOptions(allowed_mime_types=[]))

    statements = pglast.parse_sql(generate_storage_bucket(bucket))

    assert len(statements) == 1
