import os
import sys
import runpy
import logging

from datetime import timedelta
from pathlib import Path

from sampler_comparison.analysis.distribution_comparator import ConfigMismatchException
from sampler_comparison.codec.store_codec import StoreFormatException, load
from sampler_comparison.configuration import SamplerConfiguration
from sampler_comparison.recording.recording_reader import read_recording
from sampler_comparison.reporter.table_reporter import TableReporter

ASYNC_PROFILER_STORE_NAME = "async-profiler"
RECORDING_SUFFIX = ".jsonl"
BINARY_RECORDING_SUFFIX = ".jfr"

logger = logging.getLogger(__name__)

agent = None


def _start_agent(options, env):
    """
    This will init the sampling agent and start it.
    :param options: options of the run command, may contain interval, depth and file
    :param env: the environment dict from which to search for variables (usually os.environ is passed)
    :return: the agent object
    """
    from sampler_comparison.agent_builder import build_agent
    global agent
    override = {
        "sampling_interval": timedelta(milliseconds=options.interval) if options.interval else None,
        "max_stack_depth": options.depth
    }
    agent = build_agent(file_path=options.file, env=env, override=override)
    if agent is not None:
        agent.start()
    return agent


def _set_log_level(log_level):
    if log_level is None:
        return
    numeric_level = getattr(logging, log_level.upper(), None)
    if isinstance(numeric_level, int):
        logging.basicConfig(level=numeric_level)


def _read_stores(files, async_profiler_file=None):
    """
    Store files are read first, the max depth of the first one is used for reading the recordings.
    """
    store_files = [file for file in files if Path(file).suffix != RECORDING_SUFFIX]
    recording_files = [file for file in files if Path(file).suffix == RECORDING_SUFFIX]
    stores = [load(file) for file in store_files]
    max_depth = stores[0].max_depth if stores else SamplerConfiguration.get().max_stack_depth
    for file in recording_files:
        stores.extend(read_recording(file, max_depth))
    if async_profiler_file is not None:
        stores.extend(read_recording(async_profiler_file, max_depth, name=ASYNC_PROFILER_STORE_NAME))
    return stores


def compare(options, output_stream=None):
    binary_recordings = [file for file in options.files + [options.async_profiler_file]
                         if file is not None and Path(file).suffix == BINARY_RECORDING_SUFFIX]
    if binary_recordings:
        raise ValueError("Binary recordings are not supported, export them to JSON lines first: {}".format(
            ", ".join(binary_recordings)))
    stores = _read_stores(options.files, options.async_profiler_file)
    if not stores:
        raise ValueError("None of the given files contains samples")
    return TableReporter(environment={
        "output_stream": output_stream,
        "min_samples_per_thread": options.min_samples
    }).report(stores)


def run(options, rest, env, start_agent):
    # Set the sys arguments to the remaining arguments (the ones needed by the client script) if they were set.
    sys.argv = sys.argv[:1]
    if len(rest) > 0:
        sys.argv += rest

    if options.module:
        code = "run_module(modname, run_name='__main__')"
        globs = {
            'run_module': runpy.run_module,
            'modname': options.scriptfile
        }
    else:
        script_name = options.scriptfile
        sys.path.insert(0, os.path.dirname(script_name))
        with open(script_name, 'rb') as fp:
            code = compile(fp.read(), script_name, 'exec')
        globs = {
            '__file__': script_name,
            '__name__': '__main__',
            '__package__': None,
            '__cached__': None,
        }

    started_agent = start_agent(options, env)
    try:
        # Only the code of the user's own script is executed, inside the user's own environment.
        exec(code, globs, None)  # nosec
    finally:
        if started_agent is not None:
            started_agent.stop()


def _build_parser():
    from argparse import ArgumentParser
    usage = 'python -m sampler_comparison {compare,run} ...' \
            + '\nexample: python -m sampler_comparison compare sample.txt recording.jsonl --ap async.jsonl' \
            + '\nexample: python -m sampler_comparison run -i 10 -f sample.txt hello_world.py'
    parser = ArgumentParser(prog="sampler_comparison", usage=usage, description="Comparing different samplers")
    parser.add_argument('--log', dest='log_level',
                        help='Set log level, possible values: debug, info, warning, error and critical'
                             + ' (default is warning)')
    commands = parser.add_subparsers(dest="command")
    commands.required = True

    compare_parser = commands.add_parser("compare", help="Print interval statistics and the divergence matrix")
    compare_parser.add_argument('files', nargs='+', help='Store files and JSON lines recordings')
    compare_parser.add_argument('--ap', dest='async_profiler_file', help='Recording generated by async-profiler')
    compare_parser.add_argument('--min-samples', dest='min_samples', type=int,
                                help='Threads with fewer samples are left out of the interval statistics'
                                     + ' (default is 10)')

    run_parser = commands.add_parser("run", help="Run a script or module while sampling it")
    run_parser.add_argument('-i', '--interval', dest='interval', type=int,
                            help='Sampling interval in milliseconds (default is 10)')
    run_parser.add_argument('-d', '--depth', dest='depth', type=int,
                            help='Maximum number of frames taken into account per stack (default is 100)')
    run_parser.add_argument('-f', '--file', dest='file', help='Store file to write (default is sample.txt)')
    run_parser.add_argument('-m', dest='module', action='store_true',
                            help='Run a library module', default=False)
    run_parser.add_argument('scriptfile')
    return parser


def main(input_args=sys.argv[1:], env=os.environ, start_agent=_start_agent, output_stream=None):
    parser = _build_parser()
    (known_args, rest) = parser.parse_known_args(args=input_args)
    _set_log_level(known_args.log_level)

    if known_args.command == "run":
        run(known_args, rest, env, start_agent)
        return 0

    if rest:
        parser.error("unrecognized arguments: " + " ".join(rest))
    try:
        compare(known_args, output_stream)
    except (StoreFormatException, ConfigMismatchException, ValueError, OSError) as e:
        logger.debug("Comparison failed", exc_info=True)
        parser.exit(1, "{}: error: {}\n".format(parser.prog, e))
    return 0


if __name__ == "__main__":
    sys.exit(main())
