"""
Tests for the partial update merge.

The rule under test: a truthy patch value wins, anything falsy keeps the
stored value, and top-level fields absent from the patch are not emitted.
"""

from pokedex.schemas.pokemon import PokemonPatch
from pokedex.services.merge import merge_patch


class TestMergeBase:

    def test_zero_stat_is_ignored(self, make_record):
        existing = make_record(1, Attack=49, Defense=49)
        patch = PokemonPatch.model_validate({"base": {"Attack": 0, "Defense": 70}})

        update = merge_patch(existing, patch)

        assert update["base"]["Attack"] == 49
        assert update["base"]["Defense"] == 70
        assert update["base"]["HP"] == 50
        assert set(update) == {"base"}

    def test_all_six_stats_are_emitted(self, make_record):
        patch = PokemonPatch.model_validate({"base": {"Speed": 90}})

        update = merge_patch(make_record(1), patch)

        assert set(update["base"]) == {
            "HP", "Attack", "Defense", "SpecialAttack", "SpecialDefense", "Speed",
        }
        assert update["base"]["Speed"] == 90


class TestMergeTopLevel:

    def test_type_only_patch_leaves_other_fields_out(self, make_record):
        patch = PokemonPatch.model_validate({"type": ["Fire"]})

        update = merge_patch(make_record(1), patch)

        assert update == {"type": ["Fire"]}

    def test_empty_type_list_is_ignored(self, make_record):
        patch = PokemonPatch.model_validate({"type": [], "image": "http://x/y.png"})

        update = merge_patch(make_record(1), patch)

        assert "type" not in update
        assert update["image"] == "http://x/y.png"

    def test_name_merges_per_locale(self, make_record):
        existing = make_record(1, french="Bulbizarre", english="Bulbasaur")
        patch = PokemonPatch.model_validate({"name": {"english": "Bulba", "french": ""}})

        update = merge_patch(existing, patch)

        assert update["name"]["english"] == "Bulba"
        assert update["name"]["french"] == "Bulbizarre"
        assert update["name"]["japanese"] is None

    def test_empty_image_is_ignored(self, make_record):
        patch = PokemonPatch.model_validate({"image": ""})

        assert merge_patch(make_record(1), patch) == {}

    def test_unknown_keys_produce_no_update(self, make_record):
        patch = PokemonPatch.model_validate({"color": "green"})

        assert merge_patch(make_record(1), patch) == {}
