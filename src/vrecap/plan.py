from vrecap import errors, types as t

SEGMENT_LENGTH_SECONDS = 30


def _positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise errors.InvalidInput(f"{name} must be a positive integer, got {value!r}")
    return value


def plan_segments(
    total_duration_seconds: int,
    segment_length_seconds: int = SEGMENT_LENGTH_SECONDS,
) -> list[t.SegmentDescriptor]:
    total = _positive_int(total_duration_seconds, "Duration")
    length = _positive_int(segment_length_seconds, "Segment length")
    count = -(-total // length)
    return [
        t.SegmentDescriptor(
            index=i + 1,
            start_seconds=i * length,
            end_seconds=min((i + 1) * length, total),
        )
        for i in range(count)
    ]
