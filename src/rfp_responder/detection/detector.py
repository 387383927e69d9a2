"""Heuristic question detection over noisy extracted RFP text."""

from __future__ import annotations

import re
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from rfp_responder.config import DetectionConfig

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?\n])\s+")
_SENTENCE_TERMINATORS = (".", "!", "?", ":")


class QuestionRule(BaseModel):
    """Named predicate deciding whether a candidate sentence is a question."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    description: str = ""
    predicate: Callable[[str], bool]

    def matches(self, sentence: str) -> bool:
        return bool(self.predicate(sentence))


class QuestionDetector:
    """Extracts candidate questions from text produced by PDF/DOCX extraction.

    RFPs mix interrogative sentences, imperative "please describe..." requests
    and numbered items with sloppy punctuation. A candidate counts as a
    question when any registered rule matches.

    The default rules come from `DetectionConfig`. Further rules can be added
    with `register_rule` for tuning.
    """

    def __init__(self, config: DetectionConfig | None = None) -> None:
        self.config = config or DetectionConfig()
        self._starters = frozenset(word.lower() for word in self.config.question_starters)
        self._patterns = [
            re.compile(pattern, flags=re.IGNORECASE | re.MULTILINE)
            for pattern in self.config.patterns
        ]
        self._rules: dict[str, QuestionRule] = {}
        for rule in self._default_rules():
            self._rules[rule.name] = rule

    def register_rule(
        self,
        name: str,
        predicate: Callable[[str], bool],
        *,
        description: str = "",
    ) -> None:
        if name in self._rules:
            raise ValueError(f"Question rule already registered: {name}")
        self._rules[name] = QuestionRule(
            name=name, description=description, predicate=predicate
        )

    def rules(self) -> list[str]:
        return list(self._rules)

    def detect(self, raw_text: str) -> list[str]:
        """Return unique questions in order of first occurrence."""

        questions: list[str] = []
        seen: set[str] = set()
        for sentence in self.split_sentences(self.normalize(raw_text)):
            if len(sentence) < self.config.min_question_length:
                continue
            if sentence in seen:
                continue
            if self.is_question(sentence):
                seen.add(sentence)
                questions.append(sentence)
        return questions

    def is_question(self, sentence: str) -> bool:
        return any(rule.matches(sentence) for rule in self._rules.values())

    def normalize(self, text: str) -> str:
        """Drop bullet artifacts and re-join sentences wrapped across lines.

        A line is merged into the sentence accumulated so far unless that
        sentence already ends with `. ! ? :`.
        """

        lines: list[str] = []
        for line in text.splitlines():
            trimmed = line.strip()
            if not trimmed:
                continue
            if len(trimmed) == 1 and trimmed in self.config.bullet_glyphs:
                continue
            lines.append(trimmed)

        merged: list[str] = []
        current = ""
        for line in lines:
            if not current:
                current = line
            elif current.endswith(_SENTENCE_TERMINATORS):
                merged.append(current)
                current = line
            else:
                current = f"{current} {line}"
        if current:
            merged.append(current)

        return "\n".join(merged)

    @staticmethod
    def split_sentences(text: str) -> list[str]:
        return [part.strip() for part in _SENTENCE_SPLIT.split(text) if part.strip()]

    def _default_rules(self) -> list[QuestionRule]:
        return [
            QuestionRule(
                name="question_mark",
                description="Ends with a question mark.",
                predicate=lambda s: s.rstrip().endswith("?"),
            ),
            QuestionRule(
                name="pattern",
                description="Numbered, interrogative or imperative request pattern.",
                predicate=lambda s: any(p.search(s) for p in self._patterns),
            ),
            QuestionRule(
                name="leading_starter",
                description="First word is a question starter.",
                predicate=lambda s: self._starter_at(s, 0, 1),
            ),
            QuestionRule(
                name="near_starter",
                description="Question starter shortly after a leftover bullet prefix.",
                predicate=lambda s: self._starter_at(s, 1, self.config.starter_window),
            ),
        ]

    def _starter_at(self, sentence: str, start: int, stop: int) -> bool:
        words = sentence.split()
        return any(word.lower() in self._starters for word in words[start:stop])
