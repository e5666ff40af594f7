"""recoflow command line interface.

The `recoflow` command runs a job from a YAML configuration file::

    recoflow -c config/mvtx_pruning.yaml -s data/events_*.h5 -n 100
    recoflow -c config/qa.yaml -S files.list --set base.hist_file=qa.h5
"""
