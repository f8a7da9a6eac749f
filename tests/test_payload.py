"""Tests for request payload normalization."""

import json
from uuid import uuid4

import pytest

from vitrine.lib.exceptions import (
    InvalidPayload,
    MediaFileNotFound,
    MediaSourceRequired,
    MissingRequiredField,
)
from vitrine.lib.payload import (
    MediaEntry,
    extract_raw_payload,
    normalize_list,
    normalize_media_src,
    normalize_text,
    resolve_category_payload,
    resolve_media,
    resolve_payload,
)


def product_doc(**overrides):
    doc = {"name": "Arc Lamp", "slug": "arc-lamp", "categoryId": str(uuid4())}
    doc.update(overrides)
    return doc


class TestNormalizers:
    @pytest.mark.parametrize(
        "value,expected",
        [("  Oak  ", "Oak"), ("   ", None), ("", None), (None, None), (42, None)],
    )
    def test_normalize_text(self, value, expected):
        assert normalize_text(value) == expected

    def test_normalize_list_from_string(self):
        assert normalize_list("Oak, Walnut\n\nAsh ,") == ["Oak", "Walnut", "Ash"]

    def test_normalize_list_from_list(self):
        assert normalize_list([" Oak ", "", 3, "Ash"]) == ["Oak", "Ash"]

    def test_normalize_list_empty(self):
        assert normalize_list(None) == []
        assert normalize_list("") == []

    @pytest.mark.parametrize(
        "src,expected",
        [
            ("https://shop.example.com/uploads/a.png", "/uploads/a.png"),
            ("/uploads/a.png", "/uploads/a.png"),
            ("https://cdn.example.com/a.png", "https://cdn.example.com/a.png"),
        ],
    )
    def test_normalize_media_src(self, src, expected):
        assert normalize_media_src(src) == expected

    def test_normalize_media_src_follows_configured_prefix(self):
        assert normalize_media_src("https://shop.example.com/media/a.png", "/media") == "/media/a.png"
        assert normalize_media_src("https://shop.example.com/uploads/a.png", "/media") == (
            "https://shop.example.com/uploads/a.png"
        )


class TestRawPayload:
    def test_malformed_json(self):
        with pytest.raises(InvalidPayload, match="malformed JSON"):
            resolve_payload("{nope")

    def test_non_object_json(self):
        with pytest.raises(InvalidPayload, match="expected a JSON object"):
            resolve_payload("[1, 2]")

    def test_empty_payload_reports_required_fields(self):
        with pytest.raises(MissingRequiredField):
            resolve_payload("")

    def test_payload_field_wins_over_data(self):
        assert extract_raw_payload({"payload": "P", "data": "D"}) == "P"
        assert extract_raw_payload({"data": "D"}) == "D"
        assert extract_raw_payload({}) is None


class TestResolveMedia:
    def test_file_index_and_src_in_array_order(self):
        media = resolve_media(
            [
                {"src": "https://shop.example.com/uploads/old.png", "alt": " Old "},
                {"fileIndex": 1, "alt": "Side"},
                {"fileIndex": 0, "position": 99},
            ],
            ["front.png", "side.png"],
        )

        assert [(m.position, m.src, m.alt) for m in media] == [
            (0, "/uploads/old.png", "Old"),
            (1, "/uploads/side.png", "Side"),
            (2, "/uploads/front.png", None),
        ]
        assert [m.filename for m in media] == [None, "side.png", "front.png"]

    @pytest.mark.parametrize("index", [2, -1])
    def test_file_index_out_of_range(self, index):
        with pytest.raises(MediaFileNotFound):
            resolve_media([{"fileIndex": index}], ["a.png", "b.png"])

    def test_entry_without_source(self):
        with pytest.raises(MediaSourceRequired) as excinfo:
            resolve_media([{"src": "/uploads/a.png"}, {"alt": "nothing"}], [])
        assert excinfo.value.index == 1

    def test_boolean_file_index_is_not_an_index(self):
        with pytest.raises(MediaSourceRequired):
            resolve_media([{"fileIndex": True}], ["a.png", "b.png"])

    def test_entry_must_be_object(self):
        with pytest.raises(InvalidPayload):
            resolve_media(["/uploads/a.png"], [])

    def test_configured_prefix(self):
        media = resolve_media(
            [{"src": "https://shop.example.com/media/x.png"}, {"fileIndex": 0}],
            ["y.png"],
            url_prefix="/media",
        )
        assert [m.src for m in media] == ["/media/x.png", "/media/y.png"]

    def test_accepts_validated_entries(self):
        entries = resolve_payload(product_doc(media=[{"fileIndex": 0, "alt": " Front "}])).media
        assert isinstance(entries[0], MediaEntry)

        media = resolve_media(entries, ["a.png"])
        assert (media[0].src, media[0].alt) == ("/uploads/a.png", "Front")


class TestResolvePayload:
    def test_required_fields_all_reported(self):
        with pytest.raises(MissingRequiredField) as excinfo:
            resolve_payload({"name": "  "})
        assert excinfo.value.fields == ["name", "slug", "categoryId"]

    def test_invalid_category_id(self):
        with pytest.raises(InvalidPayload):
            resolve_payload(product_doc(categoryId="not-a-uuid"))

    def test_absent_keys_are_not_provided(self):
        payload = resolve_payload(product_doc())

        assert not payload.provided("summary")
        assert not payload.provided("materials")
        assert not payload.provided("media")
        assert not payload.provided("assets")
        assert payload.provided_list("materials") is None
        assert set(payload.scalar_values()) == {"name", "slug", "category_id"}

    def test_specs_and_free_text(self):
        payload = resolve_payload(
            json.dumps(
                product_doc(
                    summary="  ",
                    description=" Tall ",
                    specs={
                        "designer": "Ada",
                        "lightSource": "LED",
                        "materials": "Brass, Linen",
                        "finishOptions": ["Matte", ""],
                        "customization": "Cord length\nShade colour",
                    },
                )
            )
        )

        assert payload.summary is None
        assert payload.description == "Tall"
        assert payload.designer == "Ada"
        assert payload.light_source == "LED"
        assert not payload.provided("dimensions")
        assert payload.materials == ["Brass", "Linen"]
        assert payload.finish_options == ["Matte"]
        assert payload.customizations == ["Cord length", "Shade colour"]

    def test_specs_must_be_object(self):
        with pytest.raises(InvalidPayload, match="specs must be an object"):
            resolve_payload(product_doc(specs="Oak"))

    def test_null_media_means_empty(self):
        assert resolve_payload(product_doc(media=None)).media == []

    def test_media_must_be_list(self):
        with pytest.raises(InvalidPayload):
            resolve_payload(product_doc(media={"src": "x"}))

    def test_assets(self):
        payload = resolve_payload(
            product_doc(assets=[{"type": "pdf", "url": "/files/spec.pdf", "title": "Spec"}])
        )
        assert payload.assets[0].type == "pdf"
        assert payload.assets[0].description is None

    def test_assets_ignored_when_disabled(self):
        payload = resolve_payload(product_doc(assets="garbage"), assets_enabled=False)
        assert not payload.provided("assets")

    def test_asset_needs_type_and_url(self):
        with pytest.raises(InvalidPayload):
            resolve_payload(product_doc(assets=[{"type": "pdf"}]))


class TestResolveCategoryPayload:
    def test_create_requires_slug_and_name(self):
        with pytest.raises(MissingRequiredField) as excinfo:
            resolve_category_payload({})
        assert excinfo.value.fields == ["slug", "name"]

    def test_partial_allows_missing(self):
        payload = resolve_category_payload({"headline": "New"}, partial=True)
        assert not payload.provided("slug")
        assert payload.headline == "New"

    def test_partial_rejects_blank_name(self):
        with pytest.raises(MissingRequiredField):
            resolve_category_payload({"name": " "}, partial=True)

    def test_nested_seo_and_highlights(self):
        payload = resolve_category_payload(
            {
                "slug": "sofas",
                "name": "Sofas",
                "seo": {"title": "Sofas | Shop", "description": "Deep seats"},
                "heroImage": "/uploads/hero.png",
                "highlights": ["Handmade", " ", "Ten-year frame warranty"],
                "position": "3",
            }
        )

        assert payload.seo_title == "Sofas | Shop"
        assert payload.seo_description == "Deep seats"
        assert payload.hero_image == "/uploads/hero.png"
        assert payload.highlights == ["Handmade", "Ten-year frame warranty"]
        assert payload.position == 3

    def test_highlights_must_be_list(self):
        with pytest.raises(InvalidPayload):
            resolve_category_payload({"slug": "s", "name": "n", "highlights": "Handmade"})

    def test_scalar_values_only_cover_sent_fields(self):
        payload = resolve_category_payload({"name": "Sofas", "headline": " "}, partial=True)
        assert payload.scalar_values() == {"name": "Sofas", "headline": None}

    def test_bad_position(self):
        with pytest.raises(InvalidPayload):
            resolve_category_payload({"slug": "s", "name": "n", "position": "first"})
