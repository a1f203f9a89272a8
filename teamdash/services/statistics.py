from typing import Any, Dict, Iterable, Mapping


def _has_target(target: Any) -> bool:
    # A target of zero counts as "no target", same as a missing one.
    return target is not None and target != 0


def calculate_statistics(metrics: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Summarise performance metric rows per ``metric_type`` and overall.

    ``average_target`` divides the summed targets by the full group count,
    including rows that had no target.
    """
    by_type: Dict[str, Dict[str, Any]] = {}
    total_metrics = 0
    metrics_above_target = 0

    for metric in metrics:
        total_metrics += 1
        stats = by_type.setdefault(metric["metric_type"], {
            "count": 0,
            "total_value": 0,
            "total_target": 0,
            "above_target": 0,
        })

        value = metric.get("metric_value") or 0
        target = metric.get("metric_target")

        stats["count"] += 1
        stats["total_value"] += value

        if _has_target(target):
            stats["total_target"] += target
            if value >= target:
                stats["above_target"] += 1
                metrics_above_target += 1

    for stats in by_type.values():
        count = stats["count"]
        stats["average_value"] = stats["total_value"] / count if count > 0 else 0
        stats["average_target"] = stats["total_target"] / count if count > 0 else 0
        stats["success_rate"] = (stats["above_target"] / count) * 100 if count > 0 else 0

    return {
        "total_metrics": total_metrics,
        "metrics_above_target": metrics_above_target,
        "overall_success_rate": (metrics_above_target / total_metrics) * 100 if total_metrics > 0 else 0,
        "by_metric_type": by_type,
    }
