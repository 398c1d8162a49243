from ntier_scaffold.cli import main_entry

main_entry()
