import logging
import argparse
import warnings

from config.config import EngineConfig
from container.container import container
from dataset.loader import Loader
from engine.engine import Engine
from maps.filter_map import RowFilter
from privacy.privacy_schema import PrivacySchema
from workload.workload import Workload

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

warnings.filterwarnings("ignore", category=FutureWarning)


def _init_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument('--data', nargs='+', required=True)
    parser.add_argument('--workload_names', nargs='+', required=True)
    parser.add_argument('--workload_paths', nargs='+', required=True)
    parser.add_argument('--config', type=str, default="application.yml")
    parser.add_argument('--privacy_schema', type=str, default=None)
    parser.add_argument('--partitions', type=int, default=4)
    parser.add_argument('--fanout', type=int, default=None)
    parser.add_argument('--where', type=str, default=None)
    args = parser.parse_args(argv)
    container.register_or_update("args", args)
    return args


def init(argv=None) -> Engine:
    args = _init_args(argv)
    container.register_or_update("config", EngineConfig.load(args.config))
    if args.privacy_schema:
        container.register_or_update("PrivacySchema", PrivacySchema.load(args.privacy_schema))
    engine = Engine()
    engine.start()
    return engine


def main(engine: Engine) -> dict[str, list]:
    args = container.get("args")
    handle = engine.load(Loader().from_csv(args.data, args.partitions, args.fanout))
    if args.where:
        handle = engine.map(handle, RowFilter.from_sql(args.where))

    outputs = {}
    for name, path in zip(args.workload_names, args.workload_paths):
        logger.info(f"==== Workload: {name} ====")
        outputs[name] = []
        for idx, request in enumerate(Workload(name=name, path=path)):
            logger.info(f"Request {idx}: {request}")
            try:
                result = engine.run(handle, request)
            except Exception:
                logger.exception(f"Error in request {idx}: {request}")
                result = None
            logger.info(f"Result {idx}: {result!r}")
            outputs[name].append(result)
    return outputs


def clear(engine: Engine) -> None:
    engine.stop()
    for name in ("args", "config", "Engine", "PrivacySchema"):
        container.try_remove(name)


if __name__ == '__main__':
    engine = init()
    try:
        main(engine)
    finally:
        clear(engine)
