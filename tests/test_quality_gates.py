"""Tests for the deterministic quality gates."""

from content_pipeline.models import (
    Outline,
    OutlineSection,
    ResearchData,
    SectionContent,
    SEOMetadata,
    VoiceToneIssue,
    VoiceToneReport,
)
from content_pipeline.quality_gates import (
    count_words,
    find_incomplete_sections,
    validate_completeness,
    validate_outline,
    validate_research,
    validate_seo,
    validate_voice_tone,
)


def _outline_section(key: str, section_type: str, *, key_points: list[str] | None = None, estimated_words: int = 200) -> OutlineSection:
    return OutlineSection(
        key=key,
        title=key.title(),
        type=section_type,
        key_points=["A point"] if key_points is None else key_points,
        estimated_words=estimated_words,
    )


def _full_outline() -> Outline:
    return Outline(
        sections=[
            _outline_section("intro", "intro"),
            _outline_section("body_1", "body"),
            _outline_section("body_2", "body"),
            _outline_section("conclusion", "conclusion"),
            _outline_section("cta", "cta"),
        ],
        total_estimated_words=1000,
    )


def _section(key: str, word_count: int) -> SectionContent:
    content = " ".join(["word"] * word_count)
    return SectionContent(key=key, content=content, word_count=word_count)


def _seo(**overrides: object) -> SEOMetadata:
    values: dict[str, object] = {
        "title": "Reduce Appointment No-Shows: A Guide for Small Clinics",
        "meta_description": "x" * 140,
        "slug": "reduce-appointment-no-shows",
        "keyword_density": 1.5,
        "readability_score": "Good",
    }
    values.update(overrides)
    return SEOMetadata.model_validate(values)


def _report(score: int, severities: list[str] | None = None) -> VoiceToneReport:
    issues = [VoiceToneIssue(issue=f"Issue {i}", severity=severity) for i, severity in enumerate(severities or [])]
    return VoiceToneReport(alignment_score=score, issues=issues)


class TestCountWords:
    """Tests for count_words."""

    def test_plain_text(self) -> None:
        """Test counting whitespace-delimited words."""
        assert count_words("one two  three\nfour") == 4

    def test_markdown_markers_not_counted(self) -> None:
        """Test that bare markdown punctuation does not inflate the count."""
        assert count_words("## Heading\n\n- item one\n---\n**bold** text") == 5

    def test_empty(self) -> None:
        """Test that empty and whitespace-only text count zero."""
        assert count_words("") == 0
        assert count_words("   \n ") == 0


class TestValidateOutline:
    """Tests for validate_outline."""

    def test_complete_outline_passes(self) -> None:
        """Test that an outline with all section types and key points passes with full score."""
        result = validate_outline(_full_outline())
        assert result.passed is True
        assert result.score == 100
        assert result.issues == []

    def test_missing_intro_fails(self) -> None:
        """Test that a missing intro fails with the exact issue text."""
        outline = Outline(
            sections=[
                _outline_section("body", "body"),
                _outline_section("conclusion", "conclusion"),
                _outline_section("cta", "cta"),
            ]
        )
        result = validate_outline(outline)
        assert result.passed is False
        assert result.issues == ["Missing intro section"]
        assert result.score == 60

    def test_intro_only_outline_fails(self) -> None:
        """Test that an intro-only outline fails even though an intro is present."""
        result = validate_outline(Outline(sections=[_outline_section("intro", "intro")]))
        assert result.passed is False
        assert "Missing body section" in result.issues
        assert "Missing conclusion section" in result.issues
        assert "Missing cta section" in result.issues
        assert "Missing intro section" not in result.issues

    def test_sections_missing_key_points(self) -> None:
        """Test that sections without key points are counted and penalized."""
        outline = _full_outline()
        sections = list(outline.sections)
        sections[1] = _outline_section("body_1", "body", key_points=[])
        sections[2] = _outline_section("body_2", "body", key_points=[])
        result = validate_outline(Outline(sections=sections))
        assert "2 sections missing key points" in result.issues
        assert result.score == 80
        assert result.passed is True

    def test_too_many_sections_without_key_points_fails(self) -> None:
        """Test that the score threshold fails an outline even when all types are present."""
        sections = [_outline_section(s.key, s.type, key_points=[]) for s in _full_outline().sections]
        result = validate_outline(Outline(sections=sections))
        assert result.score == 50
        assert result.passed is False

    def test_empty_outline_fails(self) -> None:
        """Test that an outline without sections scores zero."""
        result = validate_outline(Outline(sections=[]))
        assert result.passed is False
        assert result.score == 0

    def test_undersized_estimate_is_flagged(self) -> None:
        """Test that an estimate below 80% of the goal fails the gate despite a passing score."""
        result = validate_outline(_full_outline(), word_count_goal=2000)
        assert result.passed is False
        assert result.issues == ["Estimated word count 1000 below goal 2000"]
        assert result.score == 85

    def test_undersized_estimate_ignored_without_goal(self) -> None:
        """Test that the estimate is not checked when no goal is given."""
        assert validate_outline(_full_outline()).passed is True

    def test_estimate_at_minimum_ratio_not_flagged(self) -> None:
        """Test that an estimate of exactly 80% of the goal is accepted."""
        result = validate_outline(_full_outline(), word_count_goal=1250)
        assert result.issues == []


class TestValidateCompleteness:
    """Tests for validate_completeness."""

    def test_within_range_passes(self) -> None:
        """Test that a total inside the goal band passes."""
        result = validate_completeness([_section("intro", 300), _section("body", 700)], 1000)
        assert result.passed is True
        assert result.score == 100

    def test_bounds_are_inclusive(self) -> None:
        """Test that exactly 80% and exactly 120% of the goal pass."""
        assert validate_completeness([_section("a", 400), _section("b", 400)], 1000).passed is True
        assert validate_completeness([_section("a", 600), _section("b", 600)], 1000).passed is True

    def test_below_goal_fails(self) -> None:
        """Test that a total below 80% of the goal fails."""
        result = validate_completeness([_section("a", 400), _section("b", 399)], 1000)
        assert result.passed is False
        assert any("below goal" in issue for issue in result.issues)
        assert result.score == 60

    def test_above_goal_fails(self) -> None:
        """Test that a total above 120% of the goal fails."""
        result = validate_completeness([_section("a", 601), _section("b", 600)], 1000)
        assert result.passed is False
        assert any("above goal" in issue for issue in result.issues)

    def test_short_section_fails_even_when_total_is_fine(self) -> None:
        """Test that an empty or short section fails the gate independently of the total."""
        sections = [
            _section("intro", 500),
            SectionContent(key="body", content="Hi", word_count=1),
            SectionContent(key="cta", content="", word_count=0),
            _section("conclusion", 500),
        ]
        result = validate_completeness(sections, 1000)
        assert result.passed is False
        assert any("empty or too short" in issue and "body, cta" in issue for issue in result.issues)
        assert result.score == 70


class TestFindIncompleteSections:
    """Tests for find_incomplete_sections."""

    def test_returns_keys_in_order(self) -> None:
        """Test that flagged keys keep the section order."""
        sections = [_section("a", 5), _section("b", 50), _section("c", 0)]
        assert find_incomplete_sections(sections) == ["a", "c"]

    def test_counts_content_not_reported_word_count(self) -> None:
        """Test that the gate counts the content itself."""
        section = SectionContent(key="a", content="two words", word_count=500)
        assert find_incomplete_sections([section]) == ["a"]


class TestValidateSEO:
    """Tests for validate_seo."""

    def test_optimal_metadata_passes(self) -> None:
        """Test that metadata inside every band scores 100."""
        result = validate_seo(_seo())
        assert result.passed is True
        assert result.score == 100

    def test_keyword_stuffing_fails(self) -> None:
        """Test that a density of 4.5% is flagged as keyword stuffing and fails."""
        result = validate_seo(_seo(keyword_density=4.5))
        assert result.passed is False
        assert result.score == 70
        assert any("keyword stuffing" in issue for issue in result.issues)

    def test_short_title_flagged(self) -> None:
        """Test that a short title is flagged."""
        result = validate_seo(_seo(title="Short"))
        assert any("SEO title length" in issue for issue in result.issues)
        assert result.score == 70

    def test_bad_slug_only_still_passes(self) -> None:
        """Test that a non URL-friendly slug alone costs 10 points."""
        result = validate_seo(_seo(slug="Not A Slug"))
        assert result.score == 90
        assert result.passed is True

    def test_readability_penalty(self) -> None:
        """Test that 'Needs Improvement' readability is penalized."""
        result = validate_seo(_seo(readability_score="Needs Improvement"))
        assert result.score == 95

    def test_low_density_and_long_meta_fail(self) -> None:
        """Test that several violations accumulate."""
        result = validate_seo(_seo(keyword_density=0.1, meta_description="x" * 200))
        assert result.score == 40
        assert result.passed is False


class TestValidateVoiceTone:
    """Tests for validate_voice_tone."""

    def test_threshold_is_caller_overridable(self) -> None:
        """Test that a score of 75 fails at 80 and passes at 70."""
        report = _report(75)
        assert validate_voice_tone(report).passed is False
        assert validate_voice_tone(report, threshold=70).passed is True

    def test_two_high_severity_issues_block(self) -> None:
        """Test that two high-severity issues block an otherwise passing score."""
        result = validate_voice_tone(_report(95, ["high", "high", "low"]))
        assert result.passed is False
        assert "2 high-severity brand voice violations" in result.issues
        assert result.score == 95

    def test_single_high_severity_issue_does_not_block(self) -> None:
        """Test that one high-severity issue is tolerated."""
        assert validate_voice_tone(_report(85, ["high", "medium"])).passed is True

    def test_failing_report_lists_high_severity_count(self) -> None:
        """Test that a failing score also reports the high-severity count."""
        result = validate_voice_tone(_report(50, ["high"]))
        assert result.passed is False
        assert "1 high-severity brand voice violation" in result.issues

    def test_score_only_failure_reports_zero_high_severity(self) -> None:
        """Test that a low score with no high-severity issues still reports the count."""
        result = validate_voice_tone(_report(60, ["low", "medium"]))
        assert result.passed is False
        assert result.issues == ["Alignment score 60 below threshold 80", "0 high-severity brand voice violations"]

    def test_provider_passed_flag_ignored(self) -> None:
        """Test that the provider's own verdict is not trusted."""
        report = VoiceToneReport(alignment_score=40, passed=True)
        assert validate_voice_tone(report).passed is False

    def test_threshold_monotonic(self) -> None:
        """Test that passing at a higher threshold implies passing at every lower one."""
        for score in (0, 55, 79, 80, 100):
            report = _report(score, ["high"])
            for high in range(0, 101, 10):
                if validate_voice_tone(report, threshold=high).passed:
                    assert all(validate_voice_tone(report, threshold=low).passed for low in range(0, high + 1))


class TestValidateResearch:
    """Tests for validate_research."""

    def test_complete_research_passes(self) -> None:
        """Test that research with every list populated passes."""
        research = ResearchData(
            pain_points=["a"],
            key_facts=["b"],
            differentiators=["c"],
            related_subtopics=["d"],
            suggested_angles=["e"],
        )
        result = validate_research(research)
        assert result.passed is True
        assert result.score == 100

    def test_empty_lists_flagged(self) -> None:
        """Test that each empty list is flagged."""
        result = validate_research(ResearchData(pain_points=["a"], key_facts=["b"], differentiators=["c"]))
        assert result.passed is False
        assert result.score == 60
        assert result.issues == ["Research returned no related subtopics", "Research returned no suggested angles"]
