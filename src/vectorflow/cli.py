"""
cli.py

`vectorflow-convert SRC DST`: load one layer of SRC into the in-memory model
and write it to DST. Useful to check a dataset survives the round trip and to
re-encode lines/polygons into another driver or CRS label.
"""
import argparse
import logging
import sys

from vectorflow.config import LOADER_DEFAULTS, WRITER_DEFAULTS
from vectorflow.exceptions import MixedGeometryError, VectorIOError
from vectorflow.io import load_vector, write_vector
from vectorflow.offset import CoordinateOffset

log = logging.getLogger('vectorflow')


def configure_logging(verbose: bool = False) -> None:
    logging.getLogger('fiona').setLevel(logging.ERROR)
    logging.getLogger('shapely').setLevel(logging.ERROR)
    if not log.handlers:                                # avoid dupes when called twice
        h = logging.StreamHandler(sys.stdout)
        fmt = '%(asctime)s [%(levelname)s] %(message)s' if verbose else '[%(levelname)s] %(message)s'
        h.setFormatter(logging.Formatter(fmt))
        log.addHandler(h)
    log.setLevel(logging.DEBUG if verbose else logging.INFO)


def _layer(value: str):
    return int(value) if value.isdigit() else value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='vectorflow-convert',
                                description='Load a vector dataset into memory and write it back out.')
    p.add_argument('src', help='source dataset')
    p.add_argument('dst', help='output dataset')
    p.add_argument('--layer', type=_layer, default=LOADER_DEFAULTS['layer'], help='source layer index or name')
    p.add_argument('--base-elevation', type=float, default=LOADER_DEFAULTS['base_elevation'])
    p.add_argument('--epsg', type=int, default=WRITER_DEFAULTS['epsg'])
    p.add_argument('--driver', default=WRITER_DEFAULTS['driver'])
    p.add_argument('--layer-name', default=WRITER_DEFAULTS['layer_name'])
    p.add_argument('--append', action='store_true', help='add the layer to an existing dataset')
    p.add_argument('-v', '--verbose', action='store_true')
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    offset = CoordinateOffset()
    try:
        result = load_vector(args.src, base_elevation=args.base_elevation, layer=args.layer, offset=offset)
        geometries = result.payload
        if not geometries:
            log.warning('No line or polygon features in %s; nothing written', args.src)
            return 1
        write_vector(args.dst, geometries, result.attributes, offset=offset, epsg=args.epsg,
                     driver=args.driver, layer_name=args.layer_name, append=args.append)
    except MixedGeometryError as e:
        log.error('%s', e)
        return 2
    except VectorIOError as e:
        log.error('Conversion failed: %s', e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
