import pytest

from plotrecipes import ChartGrid, InvalidOption, arrange, render
from plotrecipes.recipes.arrange import grid_shape, panel_tags

SPECIES = {"species": ["A", "A", "B"], "value": [1, 2, 3]}


def small(geom, aes, **options):
    options.setdefault("width_in", 3)
    options.setdefault("height_in", 2)
    options.setdefault("dpi", 40)
    return render(SPECIES, aes, geom, options)


def test_panel_tags():
    assert panel_tags(3, "A") == ["A", "B", "C"]
    assert panel_tags(2, "a") == ["a", "b"]
    assert panel_tags(3, "1") == ["1", "2", "3"]
    assert panel_tags(4, "I") == ["I", "II", "III", "IV"]
    assert panel_tags(27, "A")[-1] == "AA"
    assert panel_tags(2, None) == []
    with pytest.raises(InvalidOption):
        panel_tags(2, "#")


def test_grid_shape():
    assert grid_shape(4) == (2, 2)
    assert grid_shape(3, ncol=1) == (3, 1)
    assert grid_shape(5, nrow=1) == (1, 5)
    with pytest.raises(InvalidOption):
        grid_shape(5, ncol=2, nrow=2)


def test_arrange_two_charts_side_by_side(tmp_path):
    bars = small("bar", {"x": "species", "y": "value"})
    counts = small({"geom": "pie", "stat": "count"}, {"x": "species"})
    grid = arrange([bars, counts], ncol=2, tag_levels="A", title="Overview")
    assert isinstance(grid, ChartGrid)
    assert grid.shape == (1, 2)
    assert grid.tags == ["A", "B"]
    assert len(grid.figure.subfigs) == 2
    assert tuple(grid.figure.get_size_inches()) == (6.0, 2.0)
    summary = grid.describe()
    assert [c["geometry"]["geom"] for c in summary["charts"]] == ["bar", "pie"]
    assert grid.save(tmp_path / "grid.png").exists()


def test_arrange_leaves_input_charts_alone():
    bars = small("bar", {"x": "species", "y": "value"})
    before = bars.describe()
    arrange([bars, bars], nrow=2)
    assert bars.describe() == before
    assert len(bars.figure.axes) == 1


def test_arrange_needs_charts():
    with pytest.raises(InvalidOption):
        arrange([])
