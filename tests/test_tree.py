from knot_client.models import Parameter, ParameterNode
from knot_client.tree import build_parameter_trees, count_nodes, iter_nodes


def _param(id: int, parent_id: int | None = None, param_type: str = "request", **overrides) -> Parameter:
    defaults = dict(
        id=id,
        api_id=1,
        name=f"p{id}",
        type="string",
        param_type=param_type,
        parent_id=parent_id,
    )
    defaults.update(overrides)
    return Parameter(**defaults)


def _shape(nodes: list[ParameterNode]) -> list:
    return [(node.id, _shape(node.children)) for node in nodes]


def _dropped(trees) -> dict[int, str]:
    return {item.parameter.id: item.reason for item in trees.dropped}


class TestBuildParameterTrees:
    def test_nested_example_drops_dangling_parent(self):
        trees = build_parameter_trees([_param(1), _param(2, parent_id=1), _param(3, parent_id=99)])
        assert _shape(trees.request) == [(1, [(2, [])])]
        assert trees.response == []
        assert _dropped(trees) == {3: "dangling_parent"}

    def test_partitions_by_category(self):
        params = [
            _param(1, param_type="request"),
            _param(2, param_type="response"),
            _param(3, parent_id=2, param_type="response"),
            _param(4, parent_id=1, param_type="request"),
        ]
        trees = build_parameter_trees(params)
        assert _shape(trees.request) == [(1, [(4, [])])]
        assert _shape(trees.response) == [(2, [(3, [])])]
        for node, _ in iter_nodes(trees.request):
            assert node.param_type == "request"
        for node, _ in iter_nodes(trees.response):
            assert node.param_type == "response"

    def test_cross_category_parent_is_dropped(self):
        trees = build_parameter_trees([_param(1, param_type="response"), _param(2, parent_id=1)])
        assert trees.request == []
        assert _shape(trees.response) == [(1, [])]
        assert _dropped(trees) == {2: "dangling_parent"}

    def test_unknown_category_excluded(self):
        trees = build_parameter_trees([_param(1, param_type="header"), _param(2)])
        assert _shape(trees.request) == [(2, [])]
        assert _dropped(trees) == {1: "unknown_category"}

    def test_order_follows_input_not_order_field(self):
        params = [
            _param(5, order=2),
            _param(1, order=0),
            _param(7, parent_id=1, order=9),
            _param(6, parent_id=1, order=1),
        ]
        trees = build_parameter_trees(params)
        assert _shape(trees.request) == [(5, []), (1, [(7, []), (6, [])])]

    def test_child_listed_before_parent(self):
        trees = build_parameter_trees([_param(2, parent_id=1), _param(1)])
        assert _shape(trees.request) == [(1, [(2, [])])]

    def test_every_node_appears_exactly_once(self):
        params = [_param(1), _param(2, parent_id=1), _param(3, parent_id=2), _param(4, parent_id=1), _param(5)]
        trees = build_parameter_trees(params)
        ids = [node.id for node, _ in iter_nodes(trees.request)]
        assert sorted(ids) == [1, 2, 3, 4, 5]
        assert len(ids) == len(set(ids))

    def test_duplicate_id_keeps_first(self):
        trees = build_parameter_trees([_param(1, name="first"), _param(1, name="second")])
        assert [node.name for node in trees.request] == ["first"]
        assert _dropped(trees) == {1: "duplicate_id"}

    def test_parent_cycle_terminates_and_is_reported(self):
        params = [_param(1), _param(2, parent_id=3), _param(3, parent_id=2), _param(4, parent_id=4)]
        trees = build_parameter_trees(params)
        assert _shape(trees.request) == [(1, [])]
        assert _dropped(trees) == {2: "cycle", 3: "cycle", 4: "cycle"}

    def test_descendant_of_cycle_is_dropped(self):
        params = [_param(1, parent_id=2), _param(2, parent_id=1), _param(3, parent_id=1)]
        trees = build_parameter_trees(params)
        assert trees.request == []
        assert _dropped(trees) == {1: "cycle", 2: "cycle", 3: "cycle"}

    def test_child_of_dangling_parent_is_orphaned_not_cycle(self):
        trees = build_parameter_trees([_param(1), _param(3, parent_id=99), _param(4, parent_id=3), _param(5, parent_id=4)])
        assert _shape(trees.request) == [(1, [])]
        assert _dropped(trees) == {3: "dangling_parent", 4: "orphaned_ancestor", 5: "orphaned_ancestor"}

    def test_idempotent(self):
        params = [_param(1), _param(2, parent_id=1), _param(3, param_type="response"), _param(4, parent_id=3, param_type="response")]
        first = build_parameter_trees(params)
        second = build_parameter_trees(params)
        assert first.model_dump() == second.model_dump()
        assert first.request[0] is not second.request[0]

    def test_input_not_modified(self):
        params = [_param(1), _param(2, parent_id=1)]
        before = [p.model_dump() for p in params]
        build_parameter_trees(params)
        assert [p.model_dump() for p in params] == before

    def test_nodes_keep_parameter_fields(self):
        trees = build_parameter_trees([_param(1, name="email", required=True, description="Login")])
        node = trees.request[0]
        assert node.name == "email"
        assert node.required is True
        assert node.description == "Login"
        assert node.children == []

    def test_empty_input(self):
        trees = build_parameter_trees([])
        assert trees.request == []
        assert trees.response == []
        assert trees.dropped == []


class TestIterNodes:
    def test_depth_first_with_depth(self):
        trees = build_parameter_trees([_param(1), _param(2, parent_id=1), _param(3, parent_id=2), _param(4)])
        assert [(node.id, depth) for node, depth in iter_nodes(trees.request)] == [
            (1, 0), (2, 1), (3, 2), (4, 0),
        ]

    def test_revisited_node_is_skipped(self):
        a = ParameterNode(id=1, api_id=1, name="a", type="object", param_type="request")
        b = ParameterNode(id=2, api_id=1, name="b", type="object", param_type="request")
        a.children.append(b)
        b.children.append(a)
        assert [node.id for node, _ in iter_nodes([a])] == [1, 2]
        assert count_nodes([a, b]) == 2
