import argparse
from survgrad.runner import AttributionRunner

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default="configs/attribution.yaml")
    args = ap.parse_args()
    runner = AttributionRunner(args.config)
    runner.run()

if __name__ == "__main__":
    main()
