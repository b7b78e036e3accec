# petcore/activity_loader.py

import importlib.util
import os

from petcore.activity_decorator import activity_wrapper

ACTIVITIES_DIR = os.path.join(os.path.dirname(__file__), '..', 'activities')


def load_activities(directory=None):
    if directory is None:
        directory = ACTIVITIES_DIR
    activity_functions = {}
    for root, dirs, files in os.walk(directory):
        for file in sorted(files):
            if file.endswith('.py') and not file.startswith('__'):
                module_path = os.path.join(root, file)
                module_name = os.path.splitext(os.path.relpath(module_path, directory))[0].replace(os.sep, '.')
                spec = importlib.util.spec_from_file_location(f"activities.{module_name}", module_path)
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)
                activity_name = os.path.splitext(file)[0]
                # Apply the decorator to the activity function
                activity_functions[activity_name] = activity_wrapper(module.run, name=activity_name)
    return activity_functions
