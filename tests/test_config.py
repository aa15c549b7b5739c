"""Tests for editor settings and logging setup."""

import logging

import pytest

from config import AVAILABLE_OFFERS, DEFAULT_CONFIG, SplitTestConfig, setup_logging


class TestSplitTestConfig:
    def test_defaults(self):
        assert DEFAULT_CONFIG.min_variants == 2
        assert DEFAULT_CONFIG.max_variants == 5
        assert DEFAULT_CONFIG.commit_tolerance == 0.1

    def test_min_variants_must_be_positive(self):
        with pytest.raises(ValueError, match="min_variants"):
            SplitTestConfig(min_variants=0)

    def test_max_below_min_rejected(self):
        with pytest.raises(ValueError, match="max_variants"):
            SplitTestConfig(min_variants=3, max_variants=2)

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError, match="commit_tolerance"):
            SplitTestConfig(commit_tolerance=-0.1)

    def test_slider_step_must_be_positive(self):
        with pytest.raises(ValueError, match="slider_step"):
            SplitTestConfig(slider_step=0)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.max_variants = 10


class TestOffers:
    def test_offer_ids_unique(self):
        ids = [offer.id for offer in AVAILABLE_OFFERS]
        assert len(ids) == len(set(ids))


class TestSetupLogging:
    def test_named_logger_configured_once(self):
        name = "split_weights_test"
        logger = setup_logging(logging.DEBUG, module_name=name)
        try:
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
            assert setup_logging(module_name=name) is logger
            assert len(logger.handlers) == 1
        finally:
            logger.handlers.clear()
