import argparse
import os
from drama_api.factory import sample_dramas
from drama_api.repo import JsonFileRepo

parser = argparse.ArgumentParser(description="Create the catalog data file, optionally with sample dramas.")
parser.add_argument("--data-file", default=os.environ.get("DATA_FILE", os.path.join("data", "data.json")))
parser.add_argument("--seed", type=int, default=0, help="number of sample dramas to prepend")
args = parser.parse_args()

repo = JsonFileRepo(args.data_file)
dramas = repo.load()
if args.seed > 0:
    dramas[0:0] = sample_dramas(args.seed, taken_ids=(d.get("id") for d in dramas))
    repo.replace(dramas)
print("initialized catalog at", args.data_file, "with", len(dramas), "dramas")
