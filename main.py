import sys

from rich.console import Console

from argotree import *

console = Console(highlight=False)

program = Flag(sys.argv[0], required=True)
parser = Command(program, header="Argotree Example\n\n", footer="\n(c)700BCE Ra Inc.\n", shell=True)
parser.option_required = True

verbose = Flag("--verbose", "Print verbose messages.", aliases=["-v"])
parser.add(verbose)

pyramid_options = ArgumentGroup("pyramid_options")
pname = KeyValue("pname", "name", "Pyramid name.", default="Cheops")
pstones = KeyValue("pstones", "number", "Specifies <number> of stones used to build a pyramid.", required=True)
pyramid_options.add(pname).add(pstones)

init = Flag("init", "Initialize pyramid construction site.")
parser.subcommand(init).add_group(pyramid_options)

employ = KeyValue("employ", "amount", "Employ <amount> of slaves.", default="1000")
parser.subcommand(employ)

rename_options = ArgumentGroup("rename_options")
old_name = Value("old_name", "Old pyramid name.", required=True)
new_name = Value("new_name", "New pyramid name.", required=True)
rename_options.add(old_name).add(new_name)

rename = Flag("rename", "Rename pyramid")
parser.subcommand(rename).add_group(rename_options)

build = Flag("build", "Build a pyramid.")
parser.subcommand(build)

helper = Flag("help", "Print this information.").add_alias("--help").add_alias("-h")
parser.subcommand(helper)


if __name__ == '__main__':
    invoke(parser)

    if init.is_set:
        console.print("Initializing pyramid construction site.")
        console.print("Pyramid name:", pname.value)
        console.print("Amount of stones:", pstones.value)
    elif employ.is_set:
        console.print(f"Employing {employ.value} slaves.")
    elif rename.is_set:
        console.print(f"Renaming pyramid {old_name.value} to {new_name.value}.")
    elif build.is_set:
        console.print("Building a pyramid.")
    elif helper.is_set:
        parser.print_help(console)

    if verbose.is_set:
        console.print("Verbose information...")
