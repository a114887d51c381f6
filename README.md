# neuronet

A small, dependency-free multi-layer perceptron for regression and
classification on CSV data, with an interactive terminal front end.

## Installing

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

## The terminal application

Run it from a directory that holds your `*.csv` files:

    neuronet

The application prints the current screen and reads one line at a time.
A line is turned into key presses: an empty line is `enter`; the words
`up`, `down`, `tab`, `shift+tab`, `backspace` and `ctrl+c` are those keys;
any other line is typed character by character into the focused field.
`q` goes back (or quits from the main menu).

The main menu offers:

- **Train New Model**: pick a CSV file by number, then set hidden layer
  sizes (default `20,20`), hidden activations (default `relu,relu`), the
  output activation (default `linear`), epochs (default `1000`), learning
  rate (default `0.001`) and error goal (default `0.001`). Move to the
  `[ Start Training ]` button and press enter. Training runs in a
  background thread; the current epoch and loss are printed as it goes,
  and Ctrl-C leaves the progress display. When training ends you are asked
  for a name; the model is then saved as `saved_models/<name>.json`
  (the `saved_models` directory must already exist). An empty name skips
  saving.
- **Load Model & Predict**: pick a model from `saved_models/` by number
  and enter comma-separated raw input values. Regression models print a
  number in the target's original range; classification models print the
  predicted class name.
- **Quit**.

Errors (bad numbers, unknown activation names, unreadable files, a wrong
count of input values) are shown on an error screen; enter or `q` returns
to the main menu.

## CSV format

The first row is a header. Every column except the last is a numeric
input. If the last column of the first record is numeric, the file is
treated as regression; otherwise each distinct value of the last column is
a class and targets are one-hot encoded. Inputs (and regression targets)
are min-max normalised to [0, 1]; the ranges are stored with a saved model.
Problems with the file raise `neuronet.dataset.DatasetError`.

## Using the library

    from neuronet.dataset import load_csv
    from neuronet.network import init_network
    from neuronet.model_data import ModelData, load_model

    dataset = load_csv("wine.csv", 0.8)
    nn = init_network(dataset.input_size, [20, 20], dataset.output_size,
                      ["relu", "relu"], "linear")
    history = nn.train(dataset.train_inputs, dataset.train_targets,
                       1000, 0.001, 0.001, on_epoch=print)

    _, outputs = nn.feed_forward(dataset.test_inputs[0])

    model = ModelData(nn, dataset.input_mins, dataset.input_maxs,
                      dataset.target_mins, dataset.target_maxs,
                      dataset.class_map)
    model.save("model.json")
    model = load_model("model.json")

`NeuralNetwork.train` stops early once the mean error of an epoch falls
below the error goal and returns the list of per-epoch errors.

Available activations are `linear`, `relu`, `sigmoid` and `tanh`
(see `neuronet.activation.available_activations()` and
`neuronet.activation.get_activation()`).

Higher-level helpers live in `neuronet.workflow`: `parse_training_config`,
`run_training`, `evaluate` (share of correctly classified test samples),
`predict`, `select_model`, `find_csv_files`, `find_models` and
`save_trained_model`. They raise `WorkflowError` for requests that cannot
be carried out.

`neuronet.tempfiles.create_temp_file_with_content` writes text to a new
file in the system temporary directory and returns its path.

## What it does not do

The front end is line-based: it does not take over the terminal or react
to single key presses. The test-set accuracy computed after training is
kept in `App.accuracy` but not shown on screen.