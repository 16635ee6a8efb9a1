import argparse
import sys
from pathlib import Path

import dotenv
dotenv.load_dotenv()


def main():
    parser = argparse.ArgumentParser(prog="vrecap")
    sub = parser.add_subparsers(dest="command")

    p_serve = sub.add_parser("serve")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=6000)

    p_process = sub.add_parser("process", help="Convert, transcribe and recap one local video")
    p_process.add_argument("path", type=Path)
    p_process.add_argument("--duration", type=int, required=True, help="Video duration in seconds")
    p_process.add_argument("--output-dir", "-o", type=Path, default=None, help="Directory for converted audio parts")

    p_plan = sub.add_parser("plan", help="Print the segment plan for a duration")
    p_plan.add_argument("duration", type=int)

    args = parser.parse_args()

    from vrecap import runtime

    if args.command == "serve":
        runtime.require_pipeline()
        import uvicorn
        from vrecap import server
        app = server.create_app()
        uvicorn.run(app, host=args.host, port=args.port)

    elif args.command == "process":
        runtime.require_pipeline()
        import asyncio
        from vrecap import batch, errors, pipeline
        if not args.path.is_file():
            print(f"No such file: {args.path}")
            sys.exit(1)
        orchestrator = batch.Orchestrator(pipeline.create(output_dir=args.output_dir))
        try:
            results = asyncio.run(orchestrator.run(args.duration, args.path.read_bytes(), args.path.name))
        except errors.PipelineError as exc:
            print(f"Failed: {exc}", file=sys.stderr)
            sys.exit(1)
        for r in results:
            start, end = r.time_range
            print(f"\n== Part {r.segment_index} [{start}-{end}s]: {r.recap_title}\n{r.recap_body}")

    elif args.command == "plan":
        from vrecap import errors, plan, util
        try:
            segments = plan.plan_segments(args.duration)
        except errors.InvalidInput as exc:
            print(exc, file=sys.stderr)
            sys.exit(1)
        for s in segments:
            print(f"{s.index:4d}  {util.format_time(s.start_seconds)} -> {util.format_time(s.end_seconds)}")

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
