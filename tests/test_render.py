import numpy as np
import pandas as pd
import pytest

from plotrecipes import Chart, EmptyDataset, InvalidOption, const, list_geoms, render
from plotrecipes.core.config import ChartOptions


SPECIES = {"species": ["A", "A", "B"], "value": [1, 2, 3]}


def make_frame(n=30, seed=0):
    rng = np.random.default_rng(seed)
    return pd.DataFrame(
        {
            "g": np.repeat(["a", "b", "c"], n // 3),
            "h": np.tile(["u", "v"], n // 2),
            "x": rng.normal(size=n),
            "y": rng.normal(size=n),
            "w": rng.uniform(1, 5, size=n),
        }
    )


# one valid aesthetic mapping per geometry, for the parametrised checks below
VALID = {
    "point": {"x": "x", "y": "y"},
    "line": {"x": "x", "y": "y"},
    "bar": {"x": "g", "y": "w"},
    "boxplot": {"x": "g", "y": "y"},
    "violin": {"x": "g", "y": "y"},
    "histogram": {"x": "x"},
    "density": {"x": "x"},
    "dotplot": {"x": "x"},
    "pie": {"x": "g"},
    "pointrange": {"x": "g", "y": "y"},
    "segment": {"x": "x", "y": "y", "xend": "w", "yend": "w"},
    "text": {"x": "x", "y": "y", "label": "g"},
}


def test_every_geom_has_a_fixture():
    assert set(VALID) == set(list_geoms())


def test_bar_identity_stacks_rows_within_a_category():
    chart = render(SPECIES, {"x": "species", "y": "value"}, {"geom": "bar", "stat": "identity"})
    assert isinstance(chart, Chart)
    data = chart.data
    assert list(pd.unique(data["x"])) == ["A", "B"]
    a = data[data["x"] == "A"]
    assert list(a["ymin"]) == [0.0, 1.0]
    assert list(a["ymax"]) == [1.0, 3.0]
    b = data[data["x"] == "B"]
    assert list(b["ymax"]) == [3.0]
    totals = data.groupby("x", sort=False)["ymax"].max()
    assert totals.to_dict() == {"A": 3.0, "B": 3.0}
    assert len(chart.axes[0].patches) == 3


def test_bar_count_counts_rows():
    chart = render(SPECIES, {"x": "species"}, {"geom": "bar", "stat": "count"})
    counts = dict(zip(chart.data["x"], chart.data["count"]))
    assert counts == {"A": 2, "B": 1}
    assert [t.get_text() for t in chart.axes[0].get_xticklabels()] == ["A", "B"]
    assert chart.axes[0].get_ylabel() == "count"


def test_bar_identity_position_starts_at_zero():
    chart = render(SPECIES, {"x": "species", "y": "value"}, {"geom": "bar", "position": "identity"})
    assert list(chart.data["ymin"]) == [0.0, 0.0, 0.0]
    assert list(chart.data["ymax"]) == [1.0, 2.0, 3.0]


def test_bar_fill_normalises_each_category():
    data = {"x": ["a", "a", "b"], "g": ["u", "v", "u"], "y": [1.0, 3.0, 2.0]}
    chart = render(data, {"x": "x", "y": "y", "fill": "g"}, {"geom": "bar", "position": "fill"})
    tops = chart.data.groupby("x")["ymax"].max()
    assert tops["a"] == pytest.approx(1.0)
    assert tops["b"] == pytest.approx(1.0)


def test_bar_dodge_splits_width():
    data = {"x": ["a", "a", "b"], "g": ["u", "v", "u"], "y": [1.0, 3.0, 2.0]}
    chart = render(data, {"x": "x", "y": "y", "fill": "g"}, {"geom": "bar", "position": "dodge"}, {"width": 0.8})
    a = chart.data[chart.data["x"] == "a"].sort_values("xpos")
    assert list(a["xpos"]) == pytest.approx([-0.2, 0.2])
    assert list(a["width"]) == pytest.approx([0.4, 0.4])
    b = chart.data[chart.data["x"] == "b"]
    assert list(b["width"]) == pytest.approx([0.8])


def test_summary_gives_mean_and_standard_error():
    data = {"x": ["a", "a", "b"], "y": [1.0, 3.0, 5.0]}
    chart = render(data, {"x": "x", "y": "y"}, {"geom": "pointrange"})
    a = chart.data[chart.data["x"] == "a"].iloc[0]
    assert a["y"] == pytest.approx(2.0)
    se = np.std([1.0, 3.0], ddof=1) / np.sqrt(2)
    assert a["ymin"] == pytest.approx(2.0 - se)
    assert a["ymax"] == pytest.approx(2.0 + se)
    b = chart.data[chart.data["x"] == "b"].iloc[0]
    assert b["ymin"] == b["ymax"] == pytest.approx(5.0)


@pytest.mark.parametrize("geom", sorted(VALID))
def test_every_geom_renders(geom):
    chart = render(make_frame(), VALID[geom], geom)
    assert chart.geometry.geom == geom
    assert chart.geometry.stat is not None
    assert chart.geometry.position is not None
    assert len(chart.data) > 0
    assert (chart.data["PANEL"] == 1).all()


@pytest.mark.parametrize("geom", sorted(VALID))
def test_zero_rows_is_empty_for_every_geom(geom):
    empty = make_frame().iloc[0:0]
    with pytest.raises(EmptyDataset):
        render(empty, VALID[geom], geom)


@pytest.mark.parametrize("geom", ["point", "bar", "boxplot", "histogram", "text"])
def test_describe_is_idempotent(geom):
    aes = dict(VALID[geom])
    if geom in ("point", "text"):
        spec = {"geom": geom, "position": "jitter"}
    else:
        spec = geom
    first = render(make_frame(), aes, spec).describe()
    second = render(make_frame(), aes, spec).describe()
    assert first == second


def test_jitter_depends_on_seed():
    frame = make_frame()
    aes = {"x": "g", "y": "y"}
    a = render(frame, aes, {"geom": "point", "position": "jitter"}, {"seed": 1}).data
    b = render(frame, aes, {"geom": "point", "position": "jitter"}, {"seed": 2}).data
    assert not np.allclose(a["xpos"], b["xpos"])
    # amplitude is bounded by jitter_width on a discrete axis
    offsets = a["xpos"] - a["x"].map({"a": 0, "b": 1, "c": 2})
    assert offsets.abs().max() <= 0.4


def test_raw_row_geoms_keep_every_row():
    frame = make_frame()
    for geom in ("point", "boxplot", "violin", "dotplot", "text"):
        chart = render(frame, VALID[geom], geom)
        assert len(chart.data) == len(frame)


def test_levels_follow_input_order():
    data = {"x": ["z", "a", "z", "m"], "y": [1, 2, 3, 4]}
    chart = render(data, {"x": "x", "y": "y"}, "bar")
    assert [t.get_text() for t in chart.axes[0].get_xticklabels()] == ["z", "a", "m"]


def test_categorical_order_wins():
    data = pd.DataFrame({"x": pd.Categorical(["a", "b", "a"], categories=["b", "a"]), "y": [1, 2, 3]})
    chart = render(data, {"x": "x", "y": "y"}, "bar")
    assert [t.get_text() for t in chart.axes[0].get_xticklabels()] == ["b", "a"]


def test_discrete_colour_scale_and_legend():
    frame = make_frame()
    chart = render(frame, {"x": "x", "y": "y", "colour": "g"}, "point", {"palette": ["red", "green", "blue"]})
    scale = chart.scales["colour"]
    assert scale.levels == ("a", "b", "c")
    assert scale.values == ("#ff0000", "#008000", "#0000ff")
    assert len(chart.figure.legends) == 1
    assert [t.get_text() for t in chart.figure.legends[0].get_texts()] == ["a", "b", "c"]


def test_legend_none_draws_no_guides():
    chart = render(make_frame(), {"x": "x", "y": "y", "colour": "g"}, "point", {"legend_position": "none"})
    assert chart.figure.legends == []


def test_continuous_colour_uses_colourbar():
    chart = render(make_frame(), {"x": "x", "y": "y", "colour": "w"}, "point")
    assert chart.scales["colour"].limits[0] < chart.scales["colour"].limits[1]
    # the colourbar adds its own axes next to the panel
    assert len(chart.figure.axes) == 2


def test_constant_colour():
    chart = render(make_frame(), {"x": "x", "y": "y", "colour": const("#ff0000")}, "point")
    colours = chart.axes[0].collections[0].get_facecolors()
    assert tuple(colours[0][:3]) == (1.0, 0.0, 0.0)
    assert "colour" not in chart.scales


def test_labels_and_title():
    options = {"labels": {"title": "Main", "x": "Species", "y": "Value", "caption": "source: test"}}
    chart = render(SPECIES, {"x": "species", "y": "value"}, "bar", options)
    assert chart.axes[0].get_xlabel() == "Species"
    assert chart.axes[0].get_ylabel() == "Value"
    assert chart.figure._suptitle.get_text() == "Main"


def test_axis_label_format():
    chart = render(SPECIES, {"x": "species", "y": "value"}, "bar", {"y_label_format": "%.1f%%"})
    formatter = chart.axes[0].yaxis.get_major_formatter()
    assert formatter(2.0, 0) == "2.0%"


def test_bad_axis_label_format():
    with pytest.raises(InvalidOption):
        render(SPECIES, {"x": "species", "y": "value"}, "bar", {"axis_label_format": "%d %d"})


def test_unknown_palette():
    with pytest.raises(InvalidOption):
        render(SPECIES, {"x": "species", "y": "value", "fill": "species"}, "bar", {"palette": "no-such-palette"})


def test_facets_split_panels():
    frame = make_frame()
    chart = render(frame, {"x": "x", "y": "y"}, "point", {"facet": {"cols": "g", "rows": "h"}})
    assert len(chart.axes) == 6
    assert sorted(chart.data["PANEL"].unique()) == [1, 2, 3, 4, 5, 6]
    first = chart.data[chart.data["PANEL"] == 1]
    assert set(first["facet_row"]) == {"u"}
    assert set(first["facet_col"]) == {"a"}
    assert len(chart.data) == len(frame)


def test_free_scales_unshare_axes():
    frame = make_frame()
    fixed = render(frame, {"x": "x", "y": "y"}, "point", {"facet": {"cols": "g"}})
    free = render(frame, {"x": "x", "y": "y"}, "point", {"facet": {"cols": "g", "scales": "free_y"}})
    assert fixed.axes[0].get_shared_y_axes().joined(fixed.axes[0], fixed.axes[1])
    assert not free.axes[0].get_shared_y_axes().joined(free.axes[0], free.axes[1])


def test_pie_fractions_sum_to_one():
    chart = render(SPECIES, {"x": "species"}, {"geom": "pie", "stat": "count"})
    assert chart.data["fraction"].sum() == pytest.approx(1.0)
    assert "fill" in chart.scales
    assert len(chart.axes[0].patches) == 2


def test_pie_negative_values():
    with pytest.raises(InvalidOption):
        render({"x": ["a", "b"], "y": [1, -1]}, {"x": "x", "y": "y"}, {"geom": "pie", "stat": "identity"})


def test_theme_does_not_touch_rcparams():
    import matplotlib as mpl

    keys = ["axes.facecolor", "axes.grid", "font.size", "figure.facecolor", "axes.prop_cycle"]
    before = {k: mpl.rcParams[k] for k in keys}
    render(SPECIES, {"x": "species", "y": "value"}, "bar", {"theme": "dark", "base_size": 14})
    assert {k: mpl.rcParams[k] for k in keys} == before


def test_options_model_is_accepted():
    options = ChartOptions(theme="minimal", width_in=3, height_in=2, dpi=50)
    chart = render(SPECIES, {"x": "species", "y": "value"}, "bar", options)
    assert tuple(chart.figure.get_size_inches()) == (3.0, 2.0)
    assert chart.describe()["theme"] == "minimal"


def test_describe_is_json_friendly():
    import json

    chart = render(SPECIES, {"x": "species", "y": "value"}, "bar")
    summary = chart.describe()
    assert json.loads(json.dumps(summary)) == summary
    assert summary["geometry"] == {"geom": "bar", "stat": "identity", "position": "stack"}


def test_point_dodge_scales_with_x_resolution():
    data = {"x": [0.0, 0.0, 0.01, 0.01], "g": ["u", "v", "u", "v"], "y": [1, 2, 3, 4]}
    chart = render(data, {"x": "x", "y": "y", "colour": "g"}, {"geom": "point", "position": "dodge"})
    out = chart.data
    assert (out["xpos"] - out["x"]).abs().max() < 0.005
    assert out.loc[out["x"] == 0.0, "xpos"].max() < out.loc[out["x"] == 0.01, "xpos"].min()


def test_pointrange_dodge_scales_with_x_resolution():
    data = {"x": [0.0, 0.0, 0.5, 0.5, 0.0, 0.5], "g": ["u", "v", "u", "v", "u", "v"], "y": [1, 2, 3, 4, 5, 6]}
    chart = render(data, {"x": "x", "y": "y", "colour": "g"}, {"geom": "pointrange", "position": "dodge"})
    out = chart.data
    assert (out["xpos"] - out["x"]).abs().max() < 0.25
    assert out.loc[out["x"] == 0.0, "xpos"].max() < out.loc[out["x"] == 0.5, "xpos"].min()


def test_line_over_dates_uses_date_axis():
    from matplotlib.dates import ConciseDateFormatter

    dates = pd.date_range("2024-01-01", periods=300, freq="D")
    chart = render({"day": dates, "v": np.arange(300.0)}, {"x": "day", "y": "v"}, "line")
    ax = chart.axes[0]
    assert len(ax.get_xticks()) < 20
    assert isinstance(ax.xaxis.get_major_formatter(), ConciseDateFormatter)
    assert np.diff(chart.data["xpos"]) == pytest.approx(np.ones(299))


def test_irregular_dates_keep_their_gaps():
    dates = pd.to_datetime(["2024-01-01", "2024-01-02", "2024-01-10"])
    chart = render({"day": dates, "v": [1.0, 2.0, 3.0]}, {"x": "day", "y": "v"}, "point")
    assert list(np.diff(chart.data["xpos"])) == pytest.approx([1.0, 8.0])


def two_range_frame():
    return pd.DataFrame(
        {
            "x": np.concatenate([np.linspace(0, 1, 20), np.linspace(0, 10, 20)]),
            "f": ["a"] * 20 + ["b"] * 20,
        }
    )


def test_faceted_histogram_shares_bins():
    chart = render(two_range_frame(), {"x": "x"}, "histogram", {"bins": 5, "facet": {"cols": "f"}})
    widths = [p.get_width() for ax in chart.axes for p in ax.patches]
    assert widths
    assert widths == pytest.approx([2.0] * len(widths))


def test_faceted_histogram_free_x_bins_per_panel():
    options = {"bins": 5, "facet": {"cols": "f", "scales": "free_x"}}
    chart = render(two_range_frame(), {"x": "x"}, "histogram", options)
    first = chart.axes[0].patches[0].get_width()
    second = chart.axes[1].patches[0].get_width()
    assert first == pytest.approx(0.2)
    assert second == pytest.approx(2.0)


def test_faceted_dotplot_shares_bins():
    chart = render(two_range_frame(), {"x": "x"}, "dotplot", {"bins": 5, "facet": {"cols": "f"}})
    panel_a = chart.data[chart.data["PANEL"] == 1]
    # every x in [0, 1] falls in the first shared bin [0, 2)
    assert list(panel_a["xpos"]) == pytest.approx([1.0] * 20)
    assert list(panel_a["y"]) == list(range(1, 21))


def test_faceted_count_bar_free_x():
    data = {"x": ["a", "b", "a", "c"], "f": ["p", "p", "p", "q"]}
    options = {"facet": {"cols": "f", "scales": "free_x"}}
    chart = render(data, {"x": "x"}, {"geom": "bar", "stat": "count"}, options)
    assert [t.get_text() for t in chart.axes[0].get_xticklabels()] == ["a", "b"]
    assert [t.get_text() for t in chart.axes[1].get_xticklabels()] == ["c"]
    second = chart.data[chart.data["PANEL"] == 2]
    assert list(second["count"]) == [1]
    assert list(second["xpos"]) == [0.0]
    first = chart.data[chart.data["PANEL"] == 1]
    assert dict(zip(first["x"], first["count"])) == {"a": 2, "b": 1}


def guide_frame():
    return pd.DataFrame(
        {
            "x": [1.0, 2.0, 3.0, 4.0],
            "y": [1.0, 2.0, 3.0, 4.0],
            "g": ["a", "b", "a", "b"],
            "h": ["u", "u", "v", "v"],
            "k": ["p", "q", "r", "p"],
        }
    )


@pytest.mark.parametrize("position", ["right", "bottom"])
def test_extra_guides_are_merged_not_overlapped(position):
    aes = {"x": "x", "y": "y", "colour": "g", "shape": "h", "size": "k"}
    chart = render(guide_frame(), aes, "point", {"legend_position": position})
    assert len(chart.figure.legends) == 1
    texts = [t.get_text() for t in chart.figure.legends[0].get_texts()]
    for title in ("g", "h", "k"):
        assert title in texts
    assert texts.index("g") < texts.index("h") < texts.index("k")


def test_two_guides_use_separate_slots():
    chart = render(guide_frame(), {"x": "x", "y": "y", "colour": "g", "shape": "h"}, "point")
    assert len(chart.figure.legends) == 2
    assert chart.figure.legends[0].get_title().get_text() == "g"
    assert chart.figure.legends[1].get_title().get_text() == "h"


def test_pie_slice_label_format():
    chart = render(SPECIES, {"x": "species"}, "pie", {"slice_label_format": "%.1f%%"})
    labels = sorted(t.get_text() for t in chart.axes[0].texts if t.get_text())
    assert labels == ["33.3%", "66.7%"]


def test_pie_ignores_axis_label_format():
    chart = render(SPECIES, {"x": "species"}, "pie", {"axis_label_format": "%.1f"})
    assert all(t.get_text() == "" for t in chart.axes[0].texts)


def test_bad_slice_label_format():
    with pytest.raises(InvalidOption, match="slice_label_format"):
        render(SPECIES, {"x": "species"}, "pie", {"slice_label_format": "%d %d"})
