#!/usr/bin/env python3

import argparse
import sys
import time
from animsplicelib.core import batch
from animsplicelib.core import utils
from animsplicelib.core.config import load_config
from animsplicelib.core.errors import AnimSpliceError

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Check that edited .nuanmb anims keep the vanilla bone motion")
	parser.add_argument('-r', '--reference_folder', dest='reference_folder', required=True,
		help='folder of vanilla anims')
	parser.add_argument('-m', '--modified_folder', dest='modified_folder', required=True,
		help='folder of edited anims, paired by file name')
	parser.add_argument('-c', '--config', dest='config_file',
		help='optional yaml file with batch settings')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='only print the final counts')
	args = parser.parse_args(argv)
	return args

#============================================

def run(args) -> batch.ValidationSummary:
	start_time = time.time()
	config = load_config(args.config_file)
	utils.set_quiet_mode(args.quiet or config.quiet)
	print("Now validating, please wait...")
	summary = batch.validate_folders(args.reference_folder, args.modified_folder, config)
	for line in batch.summary_lines(summary):
		print(line)
	print(f"Done! elapsed time = {utils.format_elapsed(start_time)}!")
	return summary

#============================================

def main(argv: list = None):
	args = parse_args(argv)
	try:
		run(args)
	except AnimSpliceError as exc:
		print(f"ERROR: {exc}")
		sys.exit(1)


if __name__ == '__main__':
	main()
