import json

from mackerel_fluentd.collector.records import PluginStatusRecord
from mackerel_fluentd.collector.schema import (
    BUFFER_GRAPH_NAME,
    MetricDescriptor,
    build_schema,
    definitions_as_dict,
)


def test_three_descriptors_per_eligible_record_in_order():
    snap = (
        PluginStatusRecord(id="out1", is_output_plugin=True),
        PluginStatusRecord(id="in_tail", is_output_plugin=False),
        PluginStatusRecord(id="object:abc", is_output_plugin=True),
        PluginStatusRecord(id="out2", is_output_plugin=True),
    )
    graphs = build_schema(snap)
    assert list(graphs) == [BUFFER_GRAPH_NAME]
    graph = graphs["fluentd.buffer"]
    assert graph.label == "Fluentd Buffer"
    assert graph.metrics == [
        MetricDescriptor("retry.out1", "Retry Count out1"),
        MetricDescriptor("queue.out1", "Queue Length out1"),
        MetricDescriptor("size.out1", "Buffer Size out1"),
        MetricDescriptor("retry.out2", "Retry Count out2"),
        MetricDescriptor("queue.out2", "Queue Length out2"),
        MetricDescriptor("size.out2", "Buffer Size out2"),
    ]
    assert not any(m.is_cumulative_diff for m in graph.metrics)


def test_empty_or_all_ineligible_snapshot_yields_empty_graph():
    for snap in [(), (PluginStatusRecord(id="object:1", is_output_plugin=True),)]:
        graphs = build_schema(snap)
        assert graphs[BUFFER_GRAPH_NAME].metrics == []


def test_definitions_document_shape():
    graphs = build_schema((PluginStatusRecord(id="out1", is_output_plugin=True),))
    doc = json.loads(json.dumps(definitions_as_dict(graphs)))
    assert doc == {
        "graphs": {
            "fluentd.buffer": {
                "label": "Fluentd Buffer",
                "unit": "float",
                "metrics": [
                    {"name": "retry.out1", "label": "Retry Count out1", "stacked": False},
                    {"name": "queue.out1", "label": "Queue Length out1", "stacked": False},
                    {"name": "size.out1", "label": "Buffer Size out1", "stacked": False},
                ],
            }
        }
    }
