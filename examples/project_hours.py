"""
Example of estimating hours across several repositories.

The same author email in different repositories is folded into one entry, and aliases collapse
several emails of one person into a single author.
"""

from githours import Config, ProjectDirectory

__author__ = "willmcginnis"


if __name__ == "__main__":
    project = ProjectDirectory(
        working_dir=[
            "https://github.com/wdm0006/pygeohash.git",
            "https://github.com/wdm0006/git-pandas.git",
        ]
    )

    config = Config(
        merge_request=False,
        email_aliases={"will@pedalwrencher.com": "wdm0006@gmail.com"},
    )

    result = project.hours_estimate(config)
    print(result.to_json())
