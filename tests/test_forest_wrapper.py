"""Tests for forest.wrapper module."""

import numpy as np
import pandas as pd
import pytest
from sklearn.ensemble import BaggingRegressor, RandomForestClassifier, RandomForestRegressor

from vita_rf.forest.wrapper import (
    ForestFit,
    build_forest,
    fit_forest,
    impurity_importance,
    observed_class_proba,
    probability_error,
    resolve_forest_params,
)


class TestResolveForestParams:
    """Tests for resolve_forest_params."""

    def test_default_proportions(self):
        assert resolve_forest_params(100, 500) == (100, 10)

    def test_floor_and_minimum_one(self):
        assert resolve_forest_params(5, 3, mtry_prop=0.1, nodesize_prop=0.1) == (1, 1)

    def test_full_mtry(self):
        mtry, _ = resolve_forest_params(50, 7, mtry_prop=1.0)
        assert mtry == 7


class TestBuildForest:
    """Tests for build_forest."""

    def test_regression_with_replacement(self):
        est = build_forest("regression", ntree=10, mtry=3, min_node_size=2)
        assert isinstance(est, RandomForestRegressor)
        assert est.bootstrap is True
        assert est.max_features == 3
        assert est.min_samples_leaf == 2

    def test_classification_uses_classifier(self):
        est = build_forest("classification", ntree=10, mtry=3, min_node_size=2)
        assert isinstance(est, RandomForestClassifier)

    def test_probability_uses_classifier(self):
        est = build_forest("probability", ntree=10, mtry=3, min_node_size=2)
        assert isinstance(est, RandomForestClassifier)

    def test_without_replacement_uses_bagging(self):
        est = build_forest(
            "regression", ntree=10, mtry=3, min_node_size=2, replace=False, sample_fraction=0.632
        )
        assert isinstance(est, BaggingRegressor)
        assert est.bootstrap is False
        assert est.max_samples == 0.632
        assert est.estimator.max_features == 3

    def test_threads_passed_to_n_jobs(self):
        est = build_forest("regression", ntree=10, mtry=3, min_node_size=2, no_threads=4)
        assert est.n_jobs == 4


class TestFitForest:
    """Tests for fit_forest."""

    def test_impurity_corrected_shape_and_names(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X, y, ntree=100, random_state=0)

        assert isinstance(fit, ForestFit)
        assert fit.importance_mode == "impurity_corrected"
        assert fit.treetype == "regression"
        assert len(fit.variable_importance) == X.shape[1]
        assert list(fit.variable_importance.index) == list(X.columns)

    def test_impurity_corrected_noise_is_centered(self, regression_data):
        """Noise features get negative as well as positive corrected importance."""
        X, y, informative = regression_data
        fit = fit_forest(X, y, ntree=100, random_state=0)
        vi = fit.variable_importance

        assert (vi < 0).any()
        assert vi.idxmax() in informative

    def test_impurity_corrected_fits_shadow_columns(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X, y, ntree=20, random_state=0)

        assert fit.estimator.n_features_in_ == 2 * X.shape[1]
        assert fit.mtry == 8  # floor(0.2 * 40)
        assert fit.estimator.max_features == fit.mtry

    def test_impurity_corrected_mtry_not_scaled_by_shadows(self):
        rng = np.random.default_rng(0)
        X = pd.DataFrame(rng.standard_normal((60, 100)))
        y = X[0] + rng.normal(0, 0.1, 60)
        fit = fit_forest(X, y, ntree=10, random_state=0)

        assert fit.mtry == 20
        assert fit.estimator.max_features == 20
        assert fit.estimator.n_features_in_ == 200

    def test_impurity_corrected_without_replacement_mtry(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X, y, ntree=10, replace=False, random_state=0)
        assert fit.estimator.estimator.max_features == fit.mtry

    def test_impurity_importance_sums_to_one(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X, y, ntree=50, importance="impurity", random_state=0)

        assert (fit.variable_importance >= 0).all()
        assert fit.variable_importance.sum() == pytest.approx(1.0)

    def test_none_importance(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X, y, ntree=10, importance="none", random_state=0)
        assert fit.variable_importance is None

    def test_permutation_without_holdout(self, regression_data):
        X, y, informative = regression_data
        fit = fit_forest(X, y, ntree=50, importance="permutation", random_state=0)

        assert len(fit.variable_importance) == X.shape[1]
        assert fit.variable_importance.idxmax() in informative
        assert fit.n_eval == len(X)
        assert fit.holdout is False

    def test_holdout_case_weights(self, regression_data):
        X, y, _ = regression_data
        weights = np.r_[np.ones(70), np.zeros(50)]
        fit = fit_forest(
            X,
            y,
            ntree=50,
            importance="permutation",
            case_weights=weights,
            holdout=True,
            random_state=0,
        )

        assert fit.holdout is True
        assert fit.n_eval == 50
        assert fit.prediction_error is not None
        assert fit.prediction_error > 0

    def test_holdout_requires_case_weights(self, regression_data):
        X, y, _ = regression_data
        with pytest.raises(ValueError, match="requires case_weights"):
            fit_forest(X, y, ntree=10, importance="permutation", holdout=True)

    def test_holdout_weights_need_both_folds(self, regression_data):
        X, y, _ = regression_data
        with pytest.raises(ValueError, match="at least one"):
            fit_forest(
                X, y, ntree=10, importance="permutation", case_weights=np.ones(len(X)),
                holdout=True,
            )

    def test_case_weights_length_mismatch(self, regression_data):
        X, y, _ = regression_data
        with pytest.raises(ValueError, match="case_weights"):
            fit_forest(X, y, ntree=10, case_weights=np.ones(5))

    def test_negative_case_weights(self, regression_data):
        X, y, _ = regression_data
        weights = np.ones(len(X))
        weights[0] = -1
        with pytest.raises(ValueError, match="non-negative"):
            fit_forest(X, y, ntree=10, case_weights=weights)

    def test_unknown_importance(self, regression_data):
        X, y, _ = regression_data
        with pytest.raises(ValueError, match="Unknown importance"):
            fit_forest(X, y, importance="gini")

    def test_without_replacement(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X, y, ntree=30, replace=False, random_state=0)

        assert isinstance(fit.estimator, BaggingRegressor)
        assert fit.sample_fraction == pytest.approx(0.632)
        assert len(fit.variable_importance) == X.shape[1]
        assert fit.prediction_error is None

    def test_oob_error_with_replacement(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X, y, ntree=50, importance="impurity", random_state=0)
        assert fit.prediction_error is not None
        assert fit.prediction_error > 0

    def test_classification(self, classification_data):
        X, y = classification_data
        fit = fit_forest(X, y, ntree=50, tree_type="classification", random_state=0)

        assert fit.treetype == "classification"
        assert len(fit.variable_importance) == X.shape[1]
        assert 0.0 <= fit.prediction_error <= 1.0

    def test_probability_permutation(self, classification_data):
        X, y = classification_data
        weights = (np.arange(len(X)) % 2).astype(int)
        fit = fit_forest(
            X,
            y,
            ntree=50,
            tree_type="probability",
            importance="permutation",
            case_weights=weights,
            holdout=True,
            random_state=0,
        )
        assert len(fit.variable_importance) == X.shape[1]
        assert 0.0 <= fit.prediction_error <= 1.0

    def test_deterministic_with_seed(self, regression_data):
        X, y, _ = regression_data
        a = fit_forest(X, y, ntree=30, random_state=3)
        b = fit_forest(X, y, ntree=30, random_state=3)
        pd.testing.assert_series_equal(a.variable_importance, b.variable_importance)

    def test_ndarray_input_gets_default_names(self, regression_data):
        X, y, _ = regression_data
        fit = fit_forest(X.to_numpy(), y, ntree=10, importance="impurity", random_state=0)
        assert fit.variable_importance.index[0] == "X1"
        assert fit.variable_importance.index[-1] == f"X{X.shape[1]}"

    def test_missing_values_rejected(self, regression_data):
        X, y, _ = regression_data
        X = X.copy()
        X.iloc[0, 0] = np.nan
        with pytest.raises(ValueError, match="Missing values"):
            fit_forest(X, y, ntree=10)


def test_impurity_importance_bagging_maps_feature_order(regression_data):
    """Bagging importances are mapped back through estimators_features_."""
    X, y, _ = regression_data
    est = build_forest(
        "regression", ntree=20, mtry=5, min_node_size=5, replace=False,
        sample_fraction=0.632, random_state=0,
    )
    est.fit(X, y)
    imp = impurity_importance(est, X.shape[1])

    assert imp.shape == (X.shape[1],)
    assert imp.sum() == pytest.approx(1.0)
    assert int(np.argmax(imp)) < 5


class TestProbabilityError:
    """Tests for the observed-class probability error."""

    def test_observed_class_proba(self):
        proba = np.array([[0.8, 0.2], [0.3, 0.7], [0.5, 0.5]])
        p = observed_class_proba(proba, [0.0, 1.0], [0.0, 1.0, 2.0])
        np.testing.assert_allclose(p, [0.8, 0.7, 0.0])

    def test_binary_matches_brier_score(self):
        from sklearn.metrics import brier_score_loss

        proba = np.array([[0.9, 0.1], [0.4, 0.6], [0.2, 0.8], [0.7, 0.3]])
        y = np.array([0, 1, 0, 1])
        assert probability_error(proba, [0, 1], y) == pytest.approx(
            brier_score_loss(y, proba[:, 1])
        )

    def test_single_class_forest(self):
        proba = np.ones((3, 1))
        assert probability_error(proba, ["a"], ["a", "b", "a"]) == pytest.approx(1 / 3)

    def test_unseen_class_counts_as_zero_probability(self):
        proba = np.array([[0.5, 0.5]])
        assert probability_error(proba, [0, 1], [2]) == pytest.approx(1.0)

    def test_single_class_training_fold(self):
        """A probability forest grown on one class still scores a mixed hold-out fold."""
        rng = np.random.default_rng(3)
        X = pd.DataFrame(rng.standard_normal((40, 6)))
        y = np.r_[np.zeros(20), np.ones(20)]
        weights = np.r_[np.ones(20), np.zeros(20)]
        fit = fit_forest(
            X,
            y,
            ntree=10,
            tree_type="probability",
            importance="permutation",
            case_weights=weights,
            holdout=True,
            random_state=0,
        )
        assert fit.prediction_error == pytest.approx(1.0)
        assert np.all(np.isfinite(fit.variable_importance))
