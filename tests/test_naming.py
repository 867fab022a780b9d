import pytest

from friendly_mermaid.compiler.naming import IDENTIFIER_RE, IdAllocator, NameMapping, sanitize_name


def test_sanitize_transliterates_german_letters():
    assert sanitize_name("Gebäude Adresse") == "Gebaeude_Adresse"
    assert sanitize_name("Straße") == "Strasse"
    assert sanitize_name("Übergröße") == "Uebergroesse"


def test_sanitize_collapses_and_trims_underscores():
    assert sanitize_name("  Fläche in m²  ") == "Flaeche_in_m"
    assert sanitize_name("a -- b") == "a_b"
    assert sanitize_name("_x_") == "x"


def test_sanitize_falls_back_for_symbol_only_input():
    assert sanitize_name("???") == "unnamed"
    assert sanitize_name("") == "unnamed"
    assert sanitize_name("→ ←") == "unnamed"


@pytest.mark.parametrize(
    "name",
    ["CO₂", "東京 駅", "Order #42", "naïve café", "\t\n", "x", "1. OG", "Ærø", "a__b"],
)
def test_sanitize_always_returns_identifier(name):
    token = sanitize_name(name)
    assert token
    assert IDENTIFIER_RE.match(token)
    assert not token.startswith("_") and not token.endswith("_")
    assert "__" not in token
    assert not token[0].isdigit()


def test_sanitize_prefixes_leading_digit():
    assert sanitize_name("1. OG") == "n1_OG"
    assert sanitize_name("2FA Code") == "n2FA_Code"
    assert sanitize_name("Raum 1") == "Raum_1"


def test_allocate_is_stable_for_same_display_name():
    allocator = IdAllocator()
    first = allocator.allocate("Order Item")
    assert first == "Order_Item"
    assert allocator.allocate("Order Item") == first


def test_allocate_disambiguates_colliding_names():
    allocator = IdAllocator()
    assert allocator.allocate("Order Item") == "Order_Item"
    assert allocator.allocate("Order-Item") == "Order_Item2"
    assert allocator.allocate("Order  Item!") == "Order_Item3"
    assert allocator.allocate("Order-Item") == "Order_Item2"
    assert allocator.mapping.to_dict() == {
        "Order_Item": "Order Item",
        "Order_Item2": "Order-Item",
        "Order_Item3": "Order  Item!",
    }


def test_allocate_pads_to_min_length():
    allocator = IdAllocator()
    assert allocator.allocate("Straße", min_length=8) == "Strasse_"
    assert "Strasse_" in allocator.used
    # already long enough
    assert allocator.allocate("Gebäude", min_length=3) == "Gebaeude"


def test_allocate_fallback_names_stay_unique():
    allocator = IdAllocator()
    assert allocator.allocate("?") == "unnamed"
    assert allocator.allocate("!") == "unnamed2"


def test_distinct_names_never_share_identifier():
    allocator = IdAllocator()
    names = ["a b", "a-b", "a_b", "a  b", "ä b", "ae b", "a b"]
    ids = {}
    for name in names:
        ids.setdefault(name, set()).add(allocator.allocate(name))
    assert all(len(v) == 1 for v in ids.values())
    flat = [next(iter(v)) for v in ids.values()]
    assert len(flat) == len(set(flat))


def test_mapping_longest_first_order():
    mapping = NameMapping()
    mapping.assign("a", "Alpha")
    mapping.assign("abc", "Gamma")
    mapping.assign("ab", "Beta")
    mapping.assign("xy", "Other")
    assert [k for k, _ in mapping.longest_first()] == ["abc", "ab", "xy", "a"]
    assert list(mapping) == ["a", "abc", "ab", "xy"]


def test_mapping_rejects_conflicting_assignment():
    mapping = NameMapping()
    mapping.assign("a", "Alpha")
    mapping.assign("a", "Alpha")
    with pytest.raises(ValueError):
        mapping.assign("a", "Beta")
