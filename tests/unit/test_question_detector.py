import pytest

from rfp_responder.config import DetectionConfig
from rfp_responder.detection.detector import QuestionDetector


def test_single_question_is_detected() -> None:
    assert QuestionDetector().detect("What is your experience?") == ["What is your experience?"]


def test_numbered_questions_detected_in_order() -> None:
    detected = QuestionDetector().detect(
        "1. What services do you offer?\n2. How much does it cost?"
    )

    assert detected == ["What services do you offer?", "How much does it cost?"]


def test_short_candidates_are_ignored() -> None:
    assert QuestionDetector().detect("Yes?") == []


def test_duplicates_keep_first_occurrence() -> None:
    text = (
        "How do you handle support tickets?\n"
        "Describe your onboarding process.\n"
        "How do you handle support tickets?"
    )

    assert QuestionDetector().detect(text) == [
        "How do you handle support tickets?",
        "Describe your onboarding process.",
    ]


def test_bullet_glyph_lines_are_dropped_and_wrapped_lines_rejoined() -> None:
    text = (
        "●\n"
        "Please describe your approach to\n"
        "data migration and cutover.\n"
        "o\n"
        "The vendor shall comply."
    )

    detector = QuestionDetector()
    normalized = detector.normalize(text)

    assert normalized.splitlines() == [
        "Please describe your approach to data migration and cutover.",
        "The vendor shall comply.",
    ]
    assert detector.detect(text) == [
        "Please describe your approach to data migration and cutover."
    ]


def test_starter_after_leftover_bullet_prefix() -> None:
    detector = QuestionDetector()

    assert detector.is_question("- Describe the escalation path for outages.")
    assert not detector.is_question("The contract term is three years.")


def test_imperative_request_without_question_mark() -> None:
    assert QuestionDetector().detect("Kindly provide three client references.") == [
        "Kindly provide three client references."
    ]


def test_min_length_is_configurable() -> None:
    detector = QuestionDetector(DetectionConfig(min_question_length=40))

    assert detector.detect("What is your experience?") == []


def test_registered_rule_extends_detection() -> None:
    detector = QuestionDetector()
    statement = "Bidders must list subcontractors."
    assert not detector.is_question(statement)

    detector.register_rule(
        "must_list",
        lambda sentence: sentence.lower().startswith("bidders must"),
        description="Mandatory bidder disclosures.",
    )

    assert "must_list" in detector.rules()
    assert detector.detect(statement) == [statement]


def test_duplicate_rule_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        QuestionDetector().register_rule("question_mark", lambda sentence: True)
