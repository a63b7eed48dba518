#!/usr/bin/env python3

import argparse
import sys
import time
from animsplicelib.core import batch
from animsplicelib.core import utils
from animsplicelib.core.config import load_config
from animsplicelib.core.errors import AnimSpliceError

MODE_SINGLE = 'single'
MODE_BATCH = 'batch'

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Splice new bones and visibility/material edits into vanilla .nuanmb anims")
	parser.add_argument('-r', '--reference_anim_file', dest='reference_anim_file',
		help='vanilla anim to keep all existing bone motion from')
	parser.add_argument('-m', '--modified_anim_file', dest='modified_anim_file',
		help='edited anim to take new bones and visibility/material groups from')
	parser.add_argument('-o', '--output_file', dest='output_file',
		help='path of the spliced anim')
	parser.add_argument('--reference_folder', dest='reference_folder',
		help='batch mode: folder of vanilla anims')
	parser.add_argument('--modified_folder', dest='modified_folder',
		help='batch mode: folder of edited anims, paired by file name')
	parser.add_argument('--output_folder', dest='output_folder',
		help='batch mode: folder for spliced anims')
	parser.add_argument('-c', '--config', dest='config_file',
		help='optional yaml file with batch settings')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='only print errors and the final result')
	args = parser.parse_args(argv)
	return args

#============================================

def get_mode(args) -> str:
	batch_args = (args.reference_folder, args.modified_folder, args.output_folder)
	single_args = (args.reference_anim_file, args.modified_anim_file, args.output_file)
	if any(value is not None for value in batch_args):
		return MODE_BATCH
	if any(value is not None for value in single_args):
		return MODE_SINGLE
	return None

#============================================

def require_args(args, names: tuple, mode_text: str) -> None:
	for name in names:
		if getattr(args, name) is None:
			raise AnimSpliceError(f"{mode_text}, but --{name} was not given!")
	return

#============================================

def run(args) -> int:
	mode = get_mode(args)
	if mode is None:
		print("No arguments passed in! Please run with -h or --help for help.")
		return 1
	config = load_config(args.config_file)
	utils.set_quiet_mode(args.quiet or config.quiet)
	start_time = time.time()
	if mode == MODE_BATCH:
		require_args(args, ('reference_folder', 'modified_folder', 'output_folder'),
			"Batch mode specified")
		summary = batch.splice_folders(args.reference_folder, args.modified_folder,
			args.output_folder, config)
		print(f"Spliced: {summary.written}, Skipped: {summary.skipped}, "
			f"Failed: {summary.failed}, Total Modified Anims: {summary.total}")
	else:
		require_args(args, ('reference_anim_file', 'modified_anim_file', 'output_file'),
			"Batch mode was not specified")
		batch.splice_files(args.reference_anim_file, args.modified_anim_file,
			args.output_file)
	print(f"Done! elapsed time = {utils.format_elapsed(start_time)}!")
	return 0

#============================================

def main(argv: list = None):
	args = parse_args(argv)
	try:
		status = run(args)
	except AnimSpliceError as exc:
		print(f"ERROR: {exc}")
		status = 1
	sys.exit(status)


if __name__ == '__main__':
	main()
