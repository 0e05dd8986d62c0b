import pytest

from aip_reviewer.rules.naming import (
    is_plural,
    is_singular,
    looks_like_verb,
    pluralize,
    singularize,
    split_words,
    strip_verb_prefix,
)
from aip_reviewer.rules.paths import (
    CAMEL_CASE,
    KEBAB_CASE,
    LOWERCASE,
    PASCAL_CASE,
    SNAKE_CASE,
    convert_casing,
    detect_casing_style,
    find_singletons,
    is_collection_endpoint,
    is_custom_method,
    is_singleton_prefix,
    is_version_prefix,
    rename_segment,
    resource_segments,
)


class TestPlurality:
    @pytest.mark.parametrize("word, singular", [
        ("users", "user"),
        ("categories", "category"),
        ("addresses", "address"),
        ("boxes", "box"),
        ("people", "person"),
        ("indices", "index"),
        ("status", "status"),
        ("data", "data"),
    ])
    def test_singularize(self, word, singular):
        assert singularize(word) == singular

    @pytest.mark.parametrize("word, plural", [
        ("user", "users"),
        ("category", "categories"),
        ("key", "keys"),
        ("address", "addresses"),
        ("person", "people"),
        ("userProfile", "userProfiles"),
        ("config", "config"),
    ])
    def test_pluralize(self, word, plural):
        assert pluralize(word) == plural

    def test_uncountables_are_neither(self):
        for word in ("metadata", "health", "settings", "info"):
            assert not is_plural(word)
            assert not is_singular(word)

    def test_singular_and_plural(self):
        assert is_singular("order")
        assert is_plural("orders")
        assert not is_singular("analyses")


class TestVerbs:
    @pytest.mark.parametrize("word", ["getUsers", "create-order", "list_items", "delete", "execute", "GetUsers"])
    def test_verbs(self, word):
        assert looks_like_verb(word)

    @pytest.mark.parametrize("word", ["users", "search", "backup", "reports", "downloads", "address", "listings", "updates"])
    def test_nouns(self, word):
        assert not looks_like_verb(word)

    def test_strip_verb_prefix(self):
        assert strip_verb_prefix("getUsers") == "users"
        assert strip_verb_prefix("create-order") == "order"
        assert strip_verb_prefix("get") == "resource"

    def test_split_words(self):
        assert split_words("userProfile") == ["user", "profile"]
        assert split_words("user-profile") == ["user", "profile"]
        assert split_words("User_Profile") == ["user", "profile"]


class TestPathSegments:
    def test_version_prefixes(self):
        assert is_version_prefix("v1")
        assert is_version_prefix("v2.1")
        assert is_version_prefix("api")
        assert not is_version_prefix("vault")

    def test_resource_segments_skip_params_and_custom_methods(self):
        assert resource_segments("/v1/users/{id}/posts:batchGet") == ["v1", "users"]

    def test_rename_segment(self):
        assert rename_segment("/v1/user/{id}", 1, "users") == "/v1/users/{id}"
        assert rename_segment("/user/", 0, "users") == "/users/"

    @pytest.mark.parametrize("word, style", [
        ("user_profiles", SNAKE_CASE),
        ("user-profiles", KEBAB_CASE),
        ("userProfiles", CAMEL_CASE),
        ("UserProfiles", PASCAL_CASE),
        ("users", LOWERCASE),
    ])
    def test_detect_casing_style(self, word, style):
        assert detect_casing_style(word) == style

    def test_convert_casing(self):
        assert convert_casing("userProfiles", KEBAB_CASE) == "user-profiles"
        assert convert_casing("user-profiles", SNAKE_CASE) == "user_profiles"
        assert convert_casing("user_profiles", CAMEL_CASE) == "userProfiles"
        assert convert_casing("user-profiles", PASCAL_CASE) == "UserProfiles"


class TestSingletons:
    def test_resource_with_item_path_is_not_singleton(self):
        singletons = find_singletons({"paths": {"/user": {}, "/user/{id}": {}}})
        assert "/user" not in singletons

    def test_implicit_parent_is_singleton(self):
        singletons = find_singletons({"paths": {"/v1/database/backup": {}, "/v1/database/restore": {}}})
        assert "/v1/database" in singletons
        assert "/v1" not in singletons

    def test_descendants_of_singleton(self):
        singletons = frozenset({"/v1/database"})
        assert is_singleton_prefix(["v1", "database", "backup"], singletons)
        assert not is_singleton_prefix(["v1", "users"], singletons)

    def test_nested_singleton(self):
        doc = {"paths": {"/users/{id}": {}, "/users/{id}/profile": {}}}
        assert "/users/{id}/profile" in find_singletons(doc)


class TestCustomMethods:
    def test_colon_suffix(self):
        assert is_custom_method("users:cancel", [], frozenset())

    def test_hyphenated_action(self):
        assert is_custom_method("validate-hash", ["files", "{id}"], frozenset())

    def test_verb_under_resource_item(self):
        assert is_custom_method("train", ["models", "{id}"], frozenset())

    def test_verb_under_singleton(self):
        assert is_custom_method("restore", ["v1", "database"], frozenset({"/v1/database"}))

    def test_verb_under_collection_is_not_custom(self):
        assert not is_custom_method("train", ["models"], frozenset())


class TestCollectionEndpoint:
    @pytest.mark.parametrize("path", ["/users", "/v1/orders", "/users/{id}/posts"])
    def test_collections(self, path):
        assert is_collection_endpoint(path)

    @pytest.mark.parametrize("path", ["/users/{id}", "/health", "/v1", "/metadata", "/user", "/users:search", "/"])
    def test_not_collections(self, path):
        assert not is_collection_endpoint(path)
