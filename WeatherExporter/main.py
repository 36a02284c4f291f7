"""Prometheus exporter for current OpenWeather conditions."""
import argparse
import logging
import os
import signal
import sys
from typing import List, Optional, Sequence, Tuple

from dotenv import load_dotenv
from prometheus_client import start_http_server

from metrics_exporter import build_registry
from openweather_provider import DEFAULT_TIMEOUT_SECONDS, create_provider
from weather_data import GeoPoint
from weather_provider import ConfigurationError
from weather_service import build_collectors

DEFAULT_LISTEN = ":9654"
DEFAULT_DAILY_LIMIT = 1000
DEFAULT_API_VERSION = "2.5"
CONFIG_EXIT_STATUS = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("OpenWeather Prometheus exporter")
    parser.add_argument("--listen", default=os.getenv("EXPORTER_LISTEN", DEFAULT_LISTEN),
                        help="(Host and) port to listen on for Prometheus export")
    parser.add_argument("--daily-openweather-call-limit", type=int,
                        default=os.getenv("OPENWEATHER_DAILY_CALL_LIMIT", str(DEFAULT_DAILY_LIMIT)),
                        help="Make no more than this many calls/day to OpenWeather"
                             " (will return stale data when sampled too quickly)")
    parser.add_argument("--openweather-api-key", default=os.getenv("OPENWEATHER_API_KEY", ""),
                        help="API key for OpenWeather")
    parser.add_argument("--openweather-api-key-file", default=os.getenv("OPENWEATHER_API_KEY_FILE", ""),
                        help="File containing API key for OpenWeather")
    parser.add_argument("--location", action="append", default=None,
                        help="lat,lng to collect (repeatable)")
    parser.add_argument("--api-version", default=os.getenv("OPENWEATHER_API_VERSION", DEFAULT_API_VERSION),
                        help="OpenWeather API version: 2.5 (current weather) or 3.0 (one call)")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_SECONDS,
                        help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def read_key_or_file(key: str, key_file: str) -> str:
    """Return the key itself if given, else the stripped contents of key_file."""
    if key:
        return key
    if key_file:
        try:
            with open(key_file, encoding="utf-8") as f:
                return f.read().strip()
        except OSError as exc:
            raise ConfigurationError(f"Error reading OpenWeather key file {key_file}: {exc}") from exc
    return ""


def parse_locations(args: argparse.Namespace) -> List[GeoPoint]:
    values = args.location
    if not values:
        values = os.getenv("WEATHER_LOCATIONS", "").split()
    points = [GeoPoint.parse(value) for value in values]
    if not points:
        raise ConfigurationError("At least one --location is required")
    return points


def parse_listen(listen: str) -> Tuple[str, int]:
    """Split "host:port" (host optional) into an address and port."""
    host, sep, port = listen.rpartition(":")
    if not sep:
        host, port = "", listen
    try:
        port_num = int(port)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid listen address {listen!r}") from exc
    if not 0 < port_num < 65536:
        raise ConfigurationError(f"Invalid listen port {port_num}")
    return host or "0.0.0.0", port_num


def load_config(args: argparse.Namespace) -> Tuple[str, List[GeoPoint]]:
    points = parse_locations(args)
    if not args.openweather_api_key and not args.openweather_api_key_file:
        raise ConfigurationError(
            "One of --openweather-api-key or --openweather-api-key-file is required"
        )
    api_key = read_key_or_file(args.openweather_api_key, args.openweather_api_key_file)
    if not api_key:
        raise ConfigurationError("OpenWeather API key is empty")
    if args.daily_openweather_call_limit <= 0:
        raise ConfigurationError(
            f"--daily-openweather-call-limit must be positive, got {args.daily_openweather_call_limit}"
        )
    logging.info(
        "Configuration loaded: locations=%s api_version=%s daily_limit=%s",
        " ".join(str(p) for p in points),
        args.api_version,
        args.daily_openweather_call_limit,
    )
    return api_key, points


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv: Optional[Sequence[str]] = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        api_key, points = load_config(args)
        addr, port = parse_listen(args.listen)
        provider = create_provider(args.api_version, timeout=args.timeout)
        collectors = build_collectors(points, provider, api_key, args.daily_openweather_call_limit)
    except ConfigurationError as err:
        logging.error("%s", err)
        sys.exit(CONFIG_EXIT_STATUS)

    registry = build_registry(collectors)
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    server, thread = start_http_server(port, addr=addr, registry=registry)
    logging.info("Serving metrics for %d location(s) on %s:%s", len(collectors), addr, port)
    try:
        thread.join()
    except KeyboardInterrupt:
        logging.info("Stopping exporter")
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
