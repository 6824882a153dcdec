# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line front end: load a parsed program, emit facts, print them.

	borrowfacts program.json                  # grouped fact dump
	borrowfacts program.json --json           # relations as JSON
	borrowfacts program.json --facts-dir out  # also write Soufflé .facts files
	SIMPLE_NODES=1 borrowfacts program.json   # single-letter node names
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from borrowfacts.config import EmitConfig
from borrowfacts.core.diagnostics import Diagnostic
from borrowfacts.core.errors import FactGenError, ProgramFormatError
from borrowfacts.fact_emitter import emit_facts
from borrowfacts.nodes import NamingScheme
from borrowfacts.program_io import load_program

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="borrowfacts", description="Emit borrow-check facts for a parsed program")
	parser.add_argument("program", type=Path, help="Path to the program (JSON interchange format)")
	parser.add_argument("--source", type=Path, help="Source text file; overrides the program's embedded `source`")
	naming = parser.add_mutually_exclusive_group()
	naming.add_argument(
		"--simple-nodes",
		dest="naming",
		action="store_const",
		const=NamingScheme.COMPACT_LETTERS,
		help="Name nodes with single letters (default when SIMPLE_NODES is set)",
	)
	naming.add_argument(
		"--verbose-nodes",
		dest="naming",
		action="store_const",
		const=NamingScheme.VERBOSE,
		help="Name nodes `block[index]`",
	)
	parser.add_argument("--json", action="store_true", help="Print relations (and diagnostics) as JSON")
	parser.add_argument("--facts-dir", type=Path, help="Also write one tab-separated .facts file per relation here")
	parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-v: info, -vv: debug)")
	return parser


def _report(diag: Diagnostic, as_json: bool) -> None:
	if as_json:
		print(json.dumps({"exit_code": 1, "diagnostics": [diag.to_dict()]}))
	else:
		print(diag.format_human(), file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	"""
	Run the front end. Returns 0 on success, 1 when the program can't be
	loaded or is malformed (unknown variable, struct, field, ...).
	"""
	args = _build_parser().parse_args(argv)
	level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
	logging.basicConfig(level=level, format="%(name)s: %(message)s")

	config = EmitConfig.from_env()
	if args.naming is not None:
		config = replace(config, naming=args.naming)

	try:
		source = args.source.read_text(encoding="utf-8") if args.source is not None else None
		program, source = load_program(args.program, source=source)
	except (OSError, ProgramFormatError) as exc:
		_report(Diagnostic.from_exception(exc, file=str(args.program)), args.json)
		return 1
	logger.info("Loaded %s (%d blocks, naming=%s)", args.program, len(program.basic_blocks), config.naming.value)

	try:
		facts = emit_facts(program, source, config)
	except FactGenError as exc:
		_report(Diagnostic.from_exception(exc, file=str(args.program)), args.json)
		return 1

	if args.facts_dir is not None:
		written = facts.write_relation_files(args.facts_dir)
		logger.info("Wrote %d relation files to %s", len(written), args.facts_dir)

	if args.json:
		print(json.dumps({"exit_code": 0, "facts": facts.to_dict()}))
	else:
		sys.stdout.write(facts.render())
	return 0


__all__ = ["main"]
