from overdrive_import.models import KeywordSet
from overdrive_import.processing.keywords import (
    deserialize_keywords,
    normalize_keywords,
    serialize_keywords,
)


def test_subjects_are_trimmed_lowercased_and_deduplicated():
    result = normalize_keywords("Fiction, Fiction ")
    assert result.genres_other == ["fiction"]
    assert result.genres == []


def test_missing_inputs_give_empty_buckets():
    assert normalize_keywords() == KeywordSet()


def test_interest_and_lexile_annotations():
    result = normalize_keywords(interest="5", lexile="720")
    assert result.audience == ["5"]
    assert result.audience_other.count("interest level: 5") == 1
    assert result.audience_other.count("720l lexile") == 1
    assert "5" not in result.audience_other


def test_field_to_bucket_mapping_and_atos():
    result = normalize_keywords(
        subjects="Juvenile Fiction, Mystery",
        interest="Grade 3-6",
        keywords="Dragons; ,Friendship.",
        grade="Grade 3, Grade 4",
        atos="4.5",
    )
    assert result.topics == ["dragons", "friendship"]
    assert result.genres_other == ["juvenile fiction", "mystery"]
    assert result.audience == ["grade 3-6"]
    assert result.audience_other == [
        "grade 3",
        "grade 4",
        "interest level: grade 3-6",
        "atos: 4.5",
    ]


def test_trimming_only_touches_the_ends():
    result = normalize_keywords(keywords=" -/Science-Fiction\\: ,\t.;")
    assert result.topics == ["science-fiction"]


def test_serialization_round_trips():
    original = normalize_keywords("Fiction", "5", "Space", "Grade 6", "5.1", "800")
    blob = serialize_keywords(original)
    assert deserialize_keywords(blob) == original


def test_interest_tokens_are_stripped_inside_annotations():
    result = normalize_keywords(interest="4, 5")
    assert result.audience == ["4", "5"]
    assert result.audience_other == ["interest level: 4", "interest level: 5"]
