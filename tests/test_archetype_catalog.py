"""
Unit Tests for the Archetype Catalog

Tests the loadable catalog structure:
- Packaged default catalog contents and order
- Trait-level thresholds and trait score validation
- Validation errors surface as CatalogConfigurationError
- Behavioral bonus rules read the right profile signal
"""

import json

import pytest
from pydantic import ValidationError

from backend.core.exceptions import CatalogConfigurationError
from backend.persona.archetype_catalog import (
    ArchetypeCatalog,
    BehavioralBonusRule,
    BehavioralSignal,
    Trait,
    TraitLevel,
    TraitScore,
    read_signal,
    trait_level,
)
from backend.persona.models import BehavioralProfile, RiskToleranceAnalysis


class TestDefaultCatalog:
    """Test the packaged catalog"""

    def test_declaration_order(self, default_catalog):
        """Test the eight archetypes load in declared order"""
        assert default_catalog.names == [
            'Explorer',
            'Comfort Seeker',
            'Social Butterfly',
            'Digital Nomad',
            'Luxury Traveler',
            'Budget Backpacker',
            'Cultural Enthusiast',
            'Wellness Seeker',
        ]

    def test_explorer_definition(self, default_catalog):
        """Test one archetype's requirements and recommendations"""
        explorer = default_catalog.get('Explorer')

        assert explorer.required_traits == {
            Trait.OPENNESS: TraitLevel.HIGH,
            Trait.NEUROTICISM: TraitLevel.LOW,
        }
        assert 'Treehouse' in explorer.recommended_properties
        assert explorer.behavioral_bonuses[0].factor == 'novelty seeking behavior'

    def test_bonus_coverage(self, default_catalog):
        """Test only four archetypes carry behavioral bonuses"""
        with_bonuses = [a.name for a in default_catalog if a.behavioral_bonuses]
        assert with_bonuses == ['Explorer', 'Comfort Seeker', 'Luxury Traveler', 'Budget Backpacker']

    def test_membership(self, default_catalog):
        """Test name lookup"""
        assert 'Digital Nomad' in default_catalog
        assert 'The Explorer' not in default_catalog
        assert default_catalog.get('Nobody') is None


class TestTraits:
    """Test trait levels and scores"""

    @pytest.mark.parametrize('score,level', [
        (0, TraitLevel.LOW), (40, TraitLevel.LOW), (40.5, TraitLevel.MODERATE),
        (70, TraitLevel.MODERATE), (70.1, TraitLevel.HIGH), (100, TraitLevel.HIGH),
    ])
    def test_trait_level_thresholds(self, score, level):
        """Test >70 high, >40 moderate, else low"""
        assert trait_level(score) == level

    def test_levels(self, explorer_traits):
        """Test per-trait levels of a score set"""
        levels = explorer_traits.levels()

        assert levels[Trait.OPENNESS] == TraitLevel.HIGH
        assert levels[Trait.AGREEABLENESS] == TraitLevel.LOW
        assert set(levels) == set(Trait)

    def test_out_of_range_score_rejected(self):
        """Test scores outside 0-100 fail validation"""
        with pytest.raises(ValidationError):
            TraitScore(openness=101, conscientiousness=50, extraversion=50,
                       agreeableness=50, neuroticism=50)

    def test_neutral_scores(self):
        """Test the neutral score set is all moderate"""
        neutral = TraitScore.neutral()
        assert neutral.openness == 50.0
        assert set(neutral.levels().values()) == {TraitLevel.MODERATE}


class TestCatalogValidation:
    """Test catalog construction errors"""

    def test_duplicate_names(self, twin_catalog_records):
        """Test duplicate archetype names are rejected"""
        records = twin_catalog_records + [dict(twin_catalog_records[0])]

        with pytest.raises(CatalogConfigurationError) as exc_info:
            ArchetypeCatalog.from_records(records)

        assert exc_info.value.details['duplicates'] == ['First Twin']

    def test_too_many_required_traits(self):
        """Test more than three required traits is rejected"""
        record = {
            'name': 'Everything',
            'required_traits': {
                'openness': 'high',
                'conscientiousness': 'high',
                'extraversion': 'high',
                'agreeableness': 'high',
            },
            'description': 'Too demanding',
        }

        with pytest.raises(CatalogConfigurationError):
            ArchetypeCatalog.from_records([record])

    def test_unknown_trait_level(self):
        """Test an unknown trait level is rejected"""
        record = {'name': 'Odd', 'required_traits': {'openness': 'extreme'}, 'description': ''}

        with pytest.raises(CatalogConfigurationError):
            ArchetypeCatalog.from_records([record])

    def test_empty_catalog(self):
        """Test an empty catalog is rejected"""
        with pytest.raises(CatalogConfigurationError):
            ArchetypeCatalog([])


class TestCatalogFile:
    """Test loading catalogs from JSON"""

    def test_load_object_form(self, tmp_path, twin_catalog_records):
        """Test a {"archetypes": [...]} file loads in order"""
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps({'archetypes': twin_catalog_records}))

        catalog = ArchetypeCatalog.from_json(path)

        assert catalog.names == ['First Twin', 'Second Twin']

    def test_load_list_form(self, tmp_path, twin_catalog_records):
        """Test a bare list file loads"""
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps(twin_catalog_records))

        assert len(ArchetypeCatalog.from_json(path)) == 2

    def test_missing_file(self, tmp_path):
        """Test a missing file raises CatalogConfigurationError"""
        with pytest.raises(CatalogConfigurationError):
            ArchetypeCatalog.from_json(tmp_path / 'missing.json')

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises CatalogConfigurationError"""
        path = tmp_path / 'catalog.json'
        path.write_text('{not json')

        with pytest.raises(CatalogConfigurationError):
            ArchetypeCatalog.from_json(path)

    def test_wrong_shape(self, tmp_path):
        """Test a file without an archetype list is rejected"""
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps({'version': '1.0'}))

        with pytest.raises(CatalogConfigurationError):
            ArchetypeCatalog.from_json(path)


class TestBonusRules:
    """Test tagged behavioral bonus rules"""

    def test_rule_reads_its_signal(self):
        """Test a rule fires only on its signal's category"""
        rule = BehavioralBonusRule(
            signal=BehavioralSignal.RISK_TOLERANCE_CATEGORY,
            equals='Low Risk Tolerance',
            factor='low risk tolerance',
        )
        profile = BehavioralProfile()

        assert not rule.applies(profile)

        profile.decision_patterns.risk_tolerance = RiskToleranceAnalysis(
            score=10, category='Low Risk Tolerance',
        )

        assert rule.applies(profile)
        assert rule.points == 20

    def test_empty_profile_signals_are_none(self):
        """Test every signal reads None on an empty profile"""
        profile = BehavioralProfile()
        for signal in BehavioralSignal:
            assert read_signal(profile, signal) is None
