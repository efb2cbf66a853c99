"""
Integration tests for ContentStore reads and batch appends.
"""

import pytest

from kotoba.content.payloads import GrammarContent, WordEntry, WordExample
from kotoba.core.exceptions import ContentNotFoundError, InvalidLevelError
from kotoba.db.database import session_scope
from kotoba.db.models import Submission
from kotoba.study.users import UserDirectory


class TestBatchSaves:
    def test_exercises_round_trip_payload(self, session_factory, store):
        grammar = GrammarContent(grammar="〜ながら", meaning="while", example="音楽を聞きながら勉強する")
        with session_scope(session_factory) as session:
            [saved] = store.save_exercises_batch(session, "N4", [grammar])

        with session_scope(session_factory) as session:
            exercise = store.get_exercise_by_id(session, saved.id)
            assert exercise.type == "grammar"
            assert exercise.level == "N4"
            assert exercise.payload == grammar

    def test_word_examples_stored(self, session_factory, store):
        entry = WordEntry(
            kanji="猫",
            kana="ねこ",
            translation="cat",
            level="N5",
            examples=[WordExample(sentence=[{"fragment": "猫", "furigana": "ねこ"}], translation="cat")],
        )
        with session_scope(session_factory) as session:
            [saved] = store.save_words_batch(session, [entry])

        with session_scope(session_factory) as session:
            word = store.get_word_by_id(session, saved.id)
            assert word.display_form == "猫"
            assert word.examples[0].render() == "猫(ねこ)"

    def test_batch_is_all_or_nothing(self, session_factory, store):
        entries = [
            WordEntry(kana="いぬ", translation="dog", level="N5"),
            WordEntry(kana="とり", translation="bird", level="N0"),
        ]
        with pytest.raises(InvalidLevelError):
            with session_scope(session_factory) as session:
                store.save_words_batch(session, entries)

        with session_scope(session_factory) as session:
            assert store.content_counts(session) == {"exercises": 0, "words": 0}


class TestReads:
    def test_exercises_by_level_and_kind(self, session_factory, store, seed_exercises):
        seed_exercises("N5", ["question", "grammar", "audio"])
        seed_exercises("N4", ["question"])

        with session_scope(session_factory) as session:
            assert len(store.get_exercises_by_level(session, "N5")) == 3
            [grammar] = store.get_exercises_by_level(session, "N5", ["grammar"])
            assert grammar.type == "grammar"

    def test_missing_ids(self, session_factory, store):
        with session_scope(session_factory) as session:
            with pytest.raises(ContentNotFoundError):
                store.get_exercise_by_id(session, 1)
            with pytest.raises(ContentNotFoundError):
                store.get_word_by_id(session, 1)
            with pytest.raises(ContentNotFoundError):
                store.get_submission(session, 1)

    def test_submission_with_exercise(self, session_factory, store, seed_exercises):
        [exercise_id] = seed_exercises("N5", ["question"])
        with session_scope(session_factory) as session:
            user = UserDirectory(avatar_base_url=None).ensure_user(session, 3)
            submission = Submission(user_id=user.id, exercise_id=exercise_id, user_input="はい", is_correct=True)
            session.add(submission)
            session.flush()
            submission_id = submission.id

        with session_scope(session_factory) as session:
            loaded = store.get_submission(session, submission_id)
        assert loaded.exercise.id == exercise_id
        assert loaded.is_correct is True
