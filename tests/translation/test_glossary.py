"""Tests for glossary term protection, matching and persistence."""

from gameloc.translation.glossary import Glossary, _normalize_placeholders
from gameloc.translation.term_extractor import ExtractedTerm


class TestGlossary:
    def test_protect_and_restore(self):
        g = Glossary(terms={"Eileen": "Eileen", "Potion": "Thuốc hồi máu"})

        protected, mapping = g.protect_with_mapping("Eileen drinks a Potion.")
        assert "Eileen" not in protected
        assert "Potion" not in protected
        assert "Gx" in protected

        restored = g.restore(protected, mapping)
        assert "Eileen" in restored
        assert "Thuốc hồi máu" in restored

    def test_protect_case_insensitive(self):
        g = Glossary(terms={"Dark Lord": "Chúa Tể Bóng Tối"})
        protected, mapping = g.protect_with_mapping("Beware the dark lord")
        assert protected == "Beware the Gx0"
        assert mapping == {"Gx0": "Chúa Tể Bóng Tối"}

    def test_protect_word_boundary_no_substring(self):
        """'Dad' must not match inside 'habilidades'."""
        g = Glossary(terms={"Dad": "Bố", "Sword": "Kiếm"})

        text, mapping = g.protect_with_mapping("Editar habilidades destacadas")
        assert text == "Editar habilidades destacadas"
        assert mapping == {}

        text2, mapping2 = g.protect_with_mapping("Talk to Dad")
        assert "Gx" in text2
        assert g.restore(text2, mapping2) == "Talk to Bố"

        text3, _ = g.protect_with_mapping("Swordsman training")
        assert text3 == "Swordsman training"

    def test_longest_term_first(self):
        g = Glossary(terms={"Lord": "Chúa", "Dark Lord": "Chúa Tể Bóng Tối"})
        protected, mapping = g.protect_with_mapping("The Dark Lord and his Lord")
        assert protected == "The Gx1 and his Gx0"
        assert g.restore(protected, mapping) == "The Chúa Tể Bóng Tối and his Chúa"

    def test_alias_protected_as_term(self):
        g = Glossary(
            terms={"Dark Lord": "Chúa Tể"},
            aliases={"Dark Lord": ["the Dark One"]},
        )
        protected, mapping = g.protect_with_mapping("Beware the Dark One")
        assert protected == "Beware Gx0"
        assert g.restore(protected, mapping) == "Beware Chúa Tể"

    def test_no_terms_no_change(self):
        g = Glossary(terms={})
        text = "Hello World"
        protected, mapping = g.protect_with_mapping(text)
        assert protected == text
        assert g.restore(text, mapping) == text

    def test_restore_many_placeholders(self):
        terms = {f"Term{i}": f"T{i}" for i in range(12)}
        g = Glossary(terms=terms)
        protected, mapping = g.protect_with_mapping("Term1 and Term11")
        assert protected == "Gx1 and Gx11"
        assert g.restore(protected, mapping) == "T1 and T11"

    def test_len(self):
        assert len(Glossary(terms={"HP": "Máu", "MP": "Mana"})) == 2


class TestGlossaryBatchMappings:
    def test_protect_batch_independent_mappings(self):
        g = Glossary(terms={"Potion": "Thuốc", "Sword": "Kiếm"})
        texts = ["Buy a Potion", "Sharpen the Sword", "No glossary terms here"]
        protected, mappings = g.protect_batch(texts)

        assert mappings[0] == {"Gx0": "Thuốc"}
        assert mappings[1] == {"Gx1": "Kiếm"}
        assert mappings[2] == {}
        assert protected[2] == texts[2]

    def test_restore_batch_with_mappings(self):
        g = Glossary(terms={"Potion": "Thuốc", "Sword": "Kiếm"})
        protected, mappings = g.protect_batch(["Buy a Potion", "Sharpen the Sword"])
        restored = g.restore_batch(protected, mappings)
        assert restored == ["Buy a Thuốc", "Sharpen the Kiếm"]

    def test_restore_with_explicit_placeholders(self):
        g = Glossary(terms={"Potion": "Thuốc"})
        assert g.restore("Mua Gx0", {"Gx0": "Thuốc"}) == "Mua Thuốc"


class TestFindMatches:
    def test_matches_by_index(self):
        g = Glossary(terms={"Potion": "Thuốc", "HP": "Máu"})
        matches = g.find_matches(["Use a potion", "HP low", "nothing here"])
        assert matches == {"Potion": [0], "HP": [1]}

    def test_substring_match(self):
        g = Glossary(terms={"Potion": "Thuốc"})
        assert g.find_matches(["Potions for sale"]) == {"Potion": [0]}

    def test_alias_counts_for_term(self):
        g = Glossary(terms={"Dark Lord": "Chúa Tể"}, aliases={"Dark Lord": ["Dark One"]})
        matches = g.find_matches(["The Dark One rises", "The Dark Lord and the Dark One"])
        assert matches == {"Dark Lord": [0, 1]}

    def test_no_matches(self):
        assert Glossary(terms={"HP": "Máu"}).find_matches(["mana"]) == {}


class TestGlossaryMerge:
    def test_merge_adds_terms(self):
        g1 = Glossary(terms={"Potion": "Thuốc"})
        g2 = Glossary(terms={"Sword": "Kiếm"}, is_global=True)
        g1.merge(g2)
        assert g1.terms == {"Potion": "Thuốc", "Sword": "Kiếm"}
        assert g1.is_global

    def test_merge_overrides_on_conflict(self):
        g1 = Glossary(terms={"HP": "Máu"}, categories={"HP": "Stats"})
        g2 = Glossary(terms={"HP": "Sinh lực"}, categories={"HP": "Game Terms"})
        g1.merge(g2)
        assert g1.terms["HP"] == "Sinh lực"
        assert g1.categories["HP"] == "Game Terms"

    def test_from_multiple_toml_empty(self):
        assert Glossary.from_multiple_toml([]).terms == {}

    def test_from_multiple_toml_merge_order(self, tmp_path):
        base = tmp_path / "base.toml"
        base.write_text('[terms]\nHP = "Base"\nPotion = "Thuốc"\n', encoding="utf-8")
        specific = tmp_path / "specific.toml"
        specific.write_text('[terms]\nHP = "Máu"\nSword = "Kiếm"\n', encoding="utf-8")

        g = Glossary.from_multiple_toml([base, specific])
        assert g.terms == {"HP": "Máu", "Potion": "Thuốc", "Sword": "Kiếm"}


class TestGlossaryToml:
    def test_from_toml(self, tmp_path):
        toml_file = tmp_path / "glossary.toml"
        toml_file.write_text(
            '[meta]\nglobal = true\n\n'
            '[terms]\nHP = "Máu"\n"Dark Lord" = "Chúa Tể"\n\n'
            '[aliases]\n"Dark Lord" = ["the Dark One"]\n\n'
            '[categories]\nHP = "Game Terms"\n\n'
            '[descriptions]\nHP = "Health points"\n',
            encoding="utf-8",
        )
        g = Glossary.from_toml(toml_file)
        assert g.terms == {"HP": "Máu", "Dark Lord": "Chúa Tể"}
        assert g.aliases == {"Dark Lord": ["the Dark One"]}
        assert g.categories == {"HP": "Game Terms"}
        assert g.descriptions == {"HP": "Health points"}
        assert g.is_global

    def test_terms_only(self, tmp_path):
        toml_file = tmp_path / "glossary.toml"
        toml_file.write_text('[terms]\nHP = "Máu"\n', encoding="utf-8")
        g = Glossary.from_toml(toml_file)
        assert g.terms == {"HP": "Máu"}
        assert g.aliases == {}
        assert not g.is_global

    def test_save_and_load(self, tmp_path):
        g = Glossary(
            terms={"HP": "Máu", 'The "Key"': "Chìa khóa"},
            aliases={"HP": ["Health", "hp"]},
            categories={"HP": "Game Terms"},
            descriptions={"HP": "Line one\nline two"},
        )
        path = tmp_path / "out.toml"
        g.save(path)
        assert Glossary.from_toml(path) == g

    def test_from_extracted(self):
        candidates = [
            ExtractedTerm("HP", "Máu", 10, contexts=["dialogue"], confidence=0.9, category="Game Terms"),
            ExtractedTerm("Eileen", "Eileen", 2, confidence=0.3, category="Characters"),
        ]
        g = Glossary.from_extracted(candidates, min_confidence=0.5)
        assert g.terms == {"HP": "Máu"}
        assert g.categories == {"HP": "Game Terms"}
        assert "10" in g.descriptions["HP"]

    def test_from_extracted_keeps_all_by_default(self):
        candidates = [ExtractedTerm("HP", "Máu", 2), ExtractedTerm("MP", "Mana", 2)]
        assert len(Glossary.from_extracted(candidates)) == 2


class TestNormalizePlaceholders:
    """Recovery of placeholders reformatted by the model."""

    def test_space_inserted(self):
        result = _normalize_placeholders("Enter the Gx 48", {"Gx48": "Ngục"})
        assert "Gx48" in result

    def test_case_change(self):
        result = _normalize_placeholders("Enter the gx48", {"Gx48": "Ngục"})
        assert "Gx48" in result

    def test_extra_digit_not_matched(self):
        result = _normalize_placeholders("Code gx480 here", {"Gx48": "Ngục"})
        assert result == "Code gx480 here"

    def test_word_char_before_not_matched(self):
        result = _normalize_placeholders("Code aGx48 here", {"Gx48": "Ngục"})
        assert result == "Code aGx48 here"

    def test_already_correct_no_change(self):
        text = "Enter the Gx48"
        assert _normalize_placeholders(text, {"Gx48": "Ngục"}) == text

    def test_empty_mapping(self):
        assert _normalize_placeholders("Just text", {}) == "Just text"

    def test_restore_batch_with_mangled(self):
        g = Glossary(terms={"Potion": "Thuốc", "Sword": "Kiếm"})
        restored = g.restore_batch(
            ["Mua gx0", "Mài gx 0"],
            [{"Gx0": "Thuốc"}, {"Gx0": "Kiếm"}],
        )
        assert restored == ["Mua Thuốc", "Mài Kiếm"]
