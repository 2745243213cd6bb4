import pytest

from resume_tailor import suggestions
from resume_tailor.errors import GenerationFailure, MissingSessionState, UnknownSection
from resume_tailor.schema_resume import ResumeSection
from resume_tailor.suggestions import (
    SUGGESTION_FAILED,
    generate_suggestions,
    rewrite_section,
)

JOB = "Senior Python developer, Django and AWS."


def make_sections():
    return [
        ResumeSection(id="summary", title="Summary", content="Backend engineer."),
        ResumeSection(id="experience", title="Experience", content="Acme Corp"),
        ResumeSection(id="skills", title="Skills", content="Python, Go"),
    ]


class FakeModel:
    """Records prompts and replies per call; `fail_on` names titles that raise."""

    def __init__(self, reply="Use more keywords.", fail_on=()):
        self.reply = reply
        self.fail_on = set(fail_on)
        self.calls = []

    def __call__(self, system, prompt, model=None):
        self.calls.append((system, prompt, model))
        for title in self.fail_on:
            if f'titled "{title}"' in prompt:
                raise TimeoutError("model timed out")
        return self.reply


@pytest.fixture
def fake(monkeypatch):
    model = FakeModel()
    monkeypatch.setattr(suggestions, "generate_text", model)
    return model


def test_bulk_pass_keeps_going_after_a_failure(fake):
    fake.fail_on = {"Experience"}
    sections = make_sections()

    result = generate_suggestions(sections, JOB)

    assert [s.suggestions for s in result.sections] == [
        "Use more keywords.",
        SUGGESTION_FAILED,
        "Use more keywords.",
    ]
    assert result.failed == ["experience"]
    assert [o.ok for o in result.outcomes] == [True, False, True]
    assert "timed out" in result.outcomes[1].error


def test_bulk_pass_calls_once_per_section_in_order(fake):
    generate_suggestions(make_sections(), JOB, model="gpt-4o-mini")
    assert len(fake.calls) == 3
    assert ['titled "Summary"' in fake.calls[0][1],
            'titled "Experience"' in fake.calls[1][1],
            'titled "Skills"' in fake.calls[2][1]] == [True, True, True]
    assert all(call[2] == "gpt-4o-mini" for call in fake.calls)
    assert all(JOB in call[1] for call in fake.calls)


def test_bulk_pass_does_not_touch_its_input(fake):
    sections = make_sections()
    result = generate_suggestions(sections, JOB)
    assert all(s.suggestions is None for s in sections)
    assert [s.content for s in result.sections] == [s.content for s in sections]
    assert [s.id for s in result.sections] == [s.id for s in sections]


def test_empty_reply_counts_as_failure(fake):
    fake.reply = "   "
    result = generate_suggestions(make_sections()[:1], JOB)
    assert result.sections[0].suggestions == SUGGESTION_FAILED
    assert result.failed == ["summary"]


def test_status_callback_reports_progress(fake):
    fake.fail_on = {"Skills"}
    messages = []
    generate_suggestions(make_sections(), JOB, status_callback=messages.append)
    assert messages[0].startswith("🤖 1/3")
    assert any(m.startswith("⚠️") and "Skills" in m for m in messages)
    assert messages[-1] == "✅ Suggestions ready."


def test_bulk_pass_needs_a_job_description(fake):
    with pytest.raises(MissingSessionState):
        generate_suggestions(make_sections(), "   ")
    assert fake.calls == []


def test_empty_section_list_makes_no_calls(fake):
    result = generate_suggestions([], JOB)
    assert result.sections == []
    assert fake.calls == []


def test_rewrite_replaces_only_the_target(fake):
    fake.reply = "Python engineer with 5 years of Django on AWS."
    sections = make_sections()

    updated = rewrite_section(sections, "summary", JOB)

    assert updated[0].content == "Python engineer with 5 years of Django on AWS."
    assert updated[1:] == sections[1:]
    assert sections[0].content == "Backend engineer."
    assert len(fake.calls) == 1


def test_rewrite_uses_default_instruction(fake):
    rewrite_section(make_sections(), "skills", JOB, instruction="  ")
    prompt = fake.calls[0][1]
    assert 'User instruction: Improve this "Skills" section to better match the job description' in prompt
    assert "Python, Go" in prompt


def test_rewrite_passes_user_instruction(fake):
    rewrite_section(make_sections(), "summary", JOB, instruction="Focus on leadership")
    assert "User instruction: Focus on leadership" in fake.calls[0][1]


def test_rewrite_failure_keeps_sections(fake):
    fake.fail_on = {"Summary"}
    sections = make_sections()
    with pytest.raises(GenerationFailure):
        rewrite_section(sections, "summary", JOB)
    assert sections[0].content == "Backend engineer."


def test_rewrite_empty_reply_fails(fake):
    for reply in ("", "  \n\t"):
        fake.reply = reply
        with pytest.raises(GenerationFailure):
            rewrite_section(make_sections(), "summary", JOB)


def test_rewrite_unknown_section(fake):
    with pytest.raises(UnknownSection):
        rewrite_section(make_sections(), "hobbies", JOB)
    with pytest.raises(KeyError):
        rewrite_section(make_sections(), "hobbies", JOB)
    assert fake.calls == []
