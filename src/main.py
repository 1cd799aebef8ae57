"""
Speaker Network Local Server - Main Entry Point

    speaker-server                 run discovery and serve the local API
    speaker-server --discover      run one discovery pass, print the network and exit
"""

import argparse
import asyncio
import signal
import sys
import logging
import os

from exceptions import SpeakerNetworkError
from services.speaker_server import SpeakerServer

logger = logging.getLogger(__name__)

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="speaker-server", description="Speaker Network Local Server")
    parser.add_argument("--config", default=os.environ.get('CONFIG_FILE', 'config/config.yaml'),
                        help="path to the YAML configuration (default: $CONFIG_FILE or config/config.yaml)")
    parser.add_argument("--discover", action="store_true",
                        help="print discovered speakers and controllers, then exit")
    return parser.parse_args(argv)

async def print_network(server: SpeakerServer) -> int:
    """One-shot discovery listing"""
    try:
        speakers = await server.network.get_speakers()
        controllers = await server.network.get_controllers()
    except SpeakerNetworkError as e:
        print(f"Discovery failed: {e}")
        return 1

    for speaker in speakers.values():
        marker = "*" if speaker.ip in controllers else " "
        print(f"{marker} {speaker.ip:<15} {speaker.room or '-':<20} {speaker.group or '-'}")
    print(f"{len(speakers)} speakers, {len(controllers)} controllers (* = group controller)")
    return 0

async def main(args: argparse.Namespace) -> int:
    """Main entry point"""
    server = None

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        if server:
            asyncio.create_task(server.stop())

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        logger.info(f"Using configuration file: {args.config}")
        server = SpeakerServer(config_path=args.config)

        if args.discover:
            await server.start_cache()
            return await print_network(server)

        await server.start()

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Server failed: {e}")
        return 1
    finally:
        if server:
            await server.stop()

    return 0

def run():
    args = parse_args()
    try:
        sys.exit(asyncio.run(main(args)))
    except KeyboardInterrupt:
        print("\nServer stopped by user")
        sys.exit(0)

if __name__ == "__main__":
    run()
