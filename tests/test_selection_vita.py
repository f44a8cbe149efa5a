"""Tests for selection.vita module."""

import numpy as np
import pandas as pd
import pytest

from vita_rf.config.schema import ForestConfig, VitaConfig
from vita_rf.data.simulation import informative_features, simulate_correlated_data
from vita_rf.forest.holdout import HoldoutForest
from vita_rf.forest.wrapper import ForestFit
from vita_rf.selection.vita import (
    VitaResult,
    VitaSelector,
    select_variables,
    var_sel_vita,
    var_sel_vita_from_config,
)


class TestSelectVariables:
    """Tests for select_variables."""

    def test_threshold_is_strict(self):
        p = pd.Series([0.0, 0.01, 0.05, 0.2])
        assert select_variables(p, 0.05).tolist() == [1, 1, 0, 0]

    def test_zero_pvalue_selected_at_zero_threshold(self):
        p = pd.Series([0.0, 0.01, 0.5])
        assert select_variables(p, 0.0).tolist() == [1, 0, 0]

    def test_threshold_one_selects_all_below_one(self):
        p = pd.Series([0.2, 0.99, 1.0])
        assert select_variables(p, 1.0).tolist() == [1, 1, 0]


class TestArgumentChecks:
    """Argument validation happens before any forest is grown."""

    @pytest.mark.parametrize("holdout", ["TRUE", 1, None, "false"])
    def test_holdout_must_be_boolean(self, regression_data, holdout):
        X, y, _ = regression_data
        with pytest.raises(TypeError, match="Logical value required"):
            var_sel_vita(X, y, holdout=holdout)

    def test_numpy_bool_accepted(self, regression_data):
        X, y, _ = regression_data
        res = var_sel_vita(X, y, holdout=np.bool_(False), ntree=20, random_state=0)
        assert isinstance(res, VitaResult)

    def test_holdout_requires_permutation(self, regression_data):
        X, y, _ = regression_data
        with pytest.raises(ValueError, match="Set importance to 'permutation' for holdout."):
            var_sel_vita(X, y, holdout=True, importance="impurity_corrected")

    def test_single_forest_requires_corrected_impurity(self, regression_data):
        X, y, _ = regression_data
        for mode in ["permutation", "impurity"]:
            with pytest.raises(ValueError, match="impurity_corrected"):
                var_sel_vita(X, y, holdout=False, importance=mode)

    @pytest.mark.parametrize("p_t", [-0.1, 1.5])
    def test_p_t_range(self, regression_data, p_t):
        X, y, _ = regression_data
        with pytest.raises(ValueError, match="p_t"):
            var_sel_vita(X, y, p_t=p_t)


class TestVarSelVita:
    """Tests for var_sel_vita."""

    def test_info_table(self, regression_data):
        X, y, _ = regression_data
        res = var_sel_vita(X, y, ntree=100, random_state=0)

        assert list(res.info.columns) == ["vim", "CI_lower", "CI_upper", "pvalue", "selected"]
        assert list(res.info.index) == list(X.columns)
        assert set(res.info["selected"].unique()) <= {0, 1}
        assert res.info["pvalue"].between(0, 1).all()
        assert isinstance(res.forest, ForestFit)

    def test_selected_names_sorted_unique_subset(self, regression_data):
        X, y, _ = regression_data
        res = var_sel_vita(X, y, ntree=100, random_state=0)

        assert res.var == sorted(res.var)
        assert len(set(res.var)) == len(res.var)
        assert set(res.var) <= set(X.columns)
        assert res.n_selected == len(res.var)

    def test_selection_matches_rule(self, regression_data):
        X, y, _ = regression_data
        p_t = 0.1
        res = var_sel_vita(X, y, p_t=p_t, ntree=100, random_state=0)

        p = res.info["pvalue"]
        expected = sorted(res.info.index[(p == 0) | (p < p_t)])
        assert res.var == expected
        assert res.info.loc[res.var, "selected"].eq(1).all()

    def test_informative_features_selected(self, regression_data):
        X, y, informative = regression_data
        res = var_sel_vita(X, y, ntree=200, random_state=0)

        assert len(res.var) > 0
        assert set(informative[:2]) <= set(res.var)

    def test_fdr_adjustment_is_conservative(self, regression_data):
        X, y, _ = regression_data
        raw = var_sel_vita(X, y, fdr_adj=False, ntree=100, random_state=0)
        adj = var_sel_vita(X, y, fdr_adj=True, ntree=100, random_state=0)

        pd.testing.assert_series_equal(raw.info["vim"], adj.info["vim"])
        assert (adj.info["pvalue"] >= raw.info["pvalue"]).all()
        assert set(adj.var) <= set(raw.var)

    def test_by_not_less_conservative_than_bh(self, regression_data):
        X, y, _ = regression_data
        bh = var_sel_vita(X, y, fdr_method="fdr_bh", ntree=100, random_state=0)
        by = var_sel_vita(X, y, fdr_method="fdr_by", ntree=100, random_state=0)
        assert set(by.var) <= set(bh.var)

    def test_reproducible_with_seed(self, regression_data):
        X, y, _ = regression_data
        a = var_sel_vita(X, y, ntree=50, random_state=4)
        b = var_sel_vita(X, y, ntree=50, random_state=4)
        pd.testing.assert_frame_equal(a.info, b.info)
        assert a.var == b.var

    def test_holdout_mode(self, regression_data):
        X, y, _ = regression_data
        res = var_sel_vita(
            X, y, holdout=True, importance="permutation", ntree=100, random_state=0
        )

        assert isinstance(res.forest, HoldoutForest)
        assert len(res.info) == X.shape[1]
        assert "gene_00" in res.var

    def test_ndarray_input(self, regression_data):
        X, y, _ = regression_data
        res = var_sel_vita(X.to_numpy(), y, ntree=50, random_state=0)
        assert res.info.index[0] == "X1"
        assert all(v.startswith("X") for v in res.var)

    def test_classification(self, classification_data):
        X, y = classification_data
        res = var_sel_vita(X, y, tree_type="classification", ntree=100, random_state=0)
        assert len(res.info) == X.shape[1]
        assert set(res.var) <= set(X.columns)


def test_var_sel_vita_from_config(regression_data):
    X, y, _ = regression_data
    config = VitaConfig(p_t=0.1, forest=ForestConfig(ntree=50, random_state=2))

    res = var_sel_vita_from_config(X, y, config)
    direct = var_sel_vita(X, y, p_t=0.1, ntree=50, random_state=2)

    pd.testing.assert_frame_equal(res.info, direct.info)
    assert res.forest.num_trees == 50


class TestVitaSelector:
    """Tests for the scikit-learn selector."""

    def test_fit_transform(self, regression_data):
        X, y, _ = regression_data
        selector = VitaSelector(ntree=100, random_state=0).fit(X, y)

        mask = selector.get_support()
        assert mask.shape == (X.shape[1],)
        assert list(X.columns[mask]) == selector.info_.index[mask].tolist()
        assert sorted(X.columns[mask]) == selector.selected_features_

        Xt = selector.transform(X)
        assert Xt.shape == (len(X), int(mask.sum()))

    def test_feature_names_out(self, regression_data):
        X, y, _ = regression_data
        selector = VitaSelector(ntree=50, random_state=0).fit(X, y)
        names = selector.get_feature_names_out()
        assert sorted(names) == selector.selected_features_

    def test_get_params_round_trip(self):
        selector = VitaSelector(p_t=0.1, holdout=True, importance="permutation")
        params = selector.get_params()
        assert params["p_t"] == 0.1
        assert params["holdout"] is True
        assert VitaSelector(**params).get_params() == params

    def test_unfitted_raises(self):
        from sklearn.exceptions import NotFittedError

        with pytest.raises(NotFittedError):
            VitaSelector().get_support()


@pytest.mark.slow
class TestEndToEnd:
    """Selection on the default simulated design."""

    def test_recovers_correlated_groups(self):
        data = simulate_correlated_data(no_samples=100, random_state=1)
        X, y = data.drop(columns="y"), data["y"]
        truth = set(informative_features())

        res = var_sel_vita(X, y, p_t=0.05, ntree=500, random_state=1)

        assert 0 < len(res.var) < X.shape[1]
        precision = len(set(res.var) & truth) / len(res.var)
        assert precision >= 0.5
        # strongest groups (effects +/-3) are recovered
        assert len(set(res.var) & {f"X{i}" for i in range(1, 21)}) >= 10
